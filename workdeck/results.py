"""Result file written by the wait command for external status reporters."""

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

STATUS_WAITING = "Waiting"


def build_status_result(
    name: str,
    consumer: str,
    status: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Build the result record.

    Args:
        name: Work record name
        consumer: Consumer the record is addressed to
        status: "Waiting" while polling, the condition expression once met
        message: Human-readable progress message
        details: Last fetched record snapshot (WorkDetail as a dict)
    """
    return {
        "name": name,
        "consumer": consumer,
        "status": status,
        "message": message,
        "details": details or {},
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }


def write_result(path: Path, result: dict[str, Any]) -> None:
    """Write a result record atomically (write to temp file, then rename)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=".result_", suffix=".json")
    try:
        with os.fdopen(fd, "w") as f:
            json.dump(result, f, indent=2)
            f.write("\n")
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def read_result(path: Path) -> dict[str, Any]:
    """Load a result record written by write_result()."""
    with open(path) as f:
        return json.load(f)

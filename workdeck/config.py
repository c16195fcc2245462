"""Configuration loading and constants for workdeck."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml


# ---------------------------------------------------------------------------
# Backend defaults
# ---------------------------------------------------------------------------

DEFAULT_HTTP_ENDPOINT = "http://localhost:8000"
DEFAULT_REQUEST_TIMEOUT = 30

# Wait command
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_WAIT_TIMEOUT = 300.0
DEFAULT_WAIT_CONDITION = "Available"


# ---------------------------------------------------------------------------
# Dashboard geometry and timing
# ---------------------------------------------------------------------------

# Left column width and consumers-panel height as fractions of the terminal.
LEFT_COLUMN_FRACTION = 0.40
CONSUMERS_HEIGHT_FRACTION = 0.40

# Rows above the first list item: border + title (+ filter row for work).
CONSUMERS_HEADER_ROWS = 2
WORK_HEADER_ROWS = 3

# Rows consumed by the detail panel chrome: border(2) + title + status + search.
DETAIL_CHROME_ROWS = 5

HELP_BAR_ROWS = 1

LIST_WHEEL_STEP = 1
VIEWPORT_WHEEL_STEP = 3

WATCH_INTERVAL = 5.0
SPINNER_INTERVAL = 0.1


ENV_HTTP_ENDPOINT = "WORKDECK_HTTP_ENDPOINT"
ENV_TOKEN = "WORKDECK_TOKEN"
ENV_INSECURE = "WORKDECK_INSECURE"
ENV_RESULTS_PATH = "RESULTS_PATH"


@dataclass(frozen=True)
class ClientConfig:
    """Connection settings for the backend API."""

    http_endpoint: str = DEFAULT_HTTP_ENDPOINT
    token: str = ""
    insecure: bool = False
    ca_file: Optional[str] = None
    timeout: int = DEFAULT_REQUEST_TIMEOUT

    def with_overrides(self, **overrides: Any) -> "ClientConfig":
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def get_workdeck_dir() -> Path:
    """Get the .workdeck directory in the current project.

    Can be overridden via WORKDECK_DIR environment variable (used by tests).
    """
    env_override = os.environ.get("WORKDECK_DIR")
    if env_override:
        return Path(env_override)
    return Path.cwd() / ".workdeck"


def get_config_path() -> Path:
    """Get path to .workdeck/config.yaml."""
    return get_workdeck_dir() / "config.yaml"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    return get_workdeck_dir() / "logs"


def load_config_file(path: Optional[Path] = None) -> dict[str, Any]:
    """Load the YAML config file, returning {} when it does not exist.

    Raises:
        ValueError: If the file exists but is not valid YAML or not a mapping.
    """
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ValueError(f"Expected a mapping at the top of {config_path}")
    return config


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value == "":
        return None
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_client_config(path: Optional[Path] = None, **overrides: Any) -> ClientConfig:
    """Resolve the client configuration.

    Precedence, highest first:
    1. Keyword overrides (CLI flags); None means "not given"
    2. WORKDECK_HTTP_ENDPOINT / WORKDECK_TOKEN / WORKDECK_INSECURE env vars
    3. ``server:`` section of .workdeck/config.yaml
    4. Built-in defaults
    """
    server = load_config_file(path).get("server") or {}

    config = ClientConfig().with_overrides(
        http_endpoint=server.get("url"),
        token=server.get("token"),
        insecure=server.get("insecure"),
        ca_file=server.get("ca_file"),
        timeout=server.get("timeout"),
    )
    config = config.with_overrides(
        http_endpoint=os.environ.get(ENV_HTTP_ENDPOINT) or None,
        token=os.environ.get(ENV_TOKEN) or None,
        insecure=_env_flag(ENV_INSECURE),
    )
    return config.with_overrides(**overrides)


def get_results_path(flag_value: Optional[str] = None) -> Optional[Path]:
    """Results file path from --results-path, falling back to RESULTS_PATH."""
    value = flag_value or os.environ.get(ENV_RESULTS_PATH)
    return Path(value) if value else None


def parse_duration(text: str) -> float:
    """Parse a duration like ``90``, ``90s``, ``5m``, ``1h`` or ``1m30s`` into seconds.

    Raises:
        ValueError: If the text is not a recognised duration.
    """
    value = text.strip().lower()
    if not value:
        raise ValueError("empty duration")

    try:
        return float(value)
    except ValueError:
        pass

    units = {"h": 3600.0, "m": 60.0, "s": 1.0}
    total = 0.0
    number = ""
    for ch in value:
        if ch.isdigit() or ch == ".":
            number += ch
        elif ch in units and number:
            total += float(number) * units[ch]
            number = ""
        else:
            raise ValueError(f"invalid duration: {text!r}")
    if number:
        raise ValueError(f"invalid duration: {text!r} (missing unit)")
    return total

"""Typed records for consumers and work bundles, and wire conversion.

The backend returns resource-bundle records as JSON dicts. These helpers
turn them into immutable dataclasses for display, and into the canonical
ManifestWork-shaped mapping used for the JSON/YAML views and the clipboard.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

import yaml


CONDITION_TRUE = "True"

WORK_API_VERSION = "work.open-cluster-management.io/v1"
WORK_KIND = "ManifestWork"


@dataclass(frozen=True)
class Condition:
    type: str
    status: str
    reason: str = ""
    message: str = ""

    @property
    def is_true(self) -> bool:
        return self.status == CONDITION_TRUE


@dataclass(frozen=True)
class ConsumerRef:
    id: str
    name: str


@dataclass(frozen=True)
class WorkSummary:
    id: str
    name: str
    consumer_name: str
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True)
class ManifestRef:
    kind: str
    name: str
    namespace: str = ""


@dataclass(frozen=True)
class ResourceStatus:
    kind: str
    name: str
    namespace: str = ""
    conditions: tuple[Condition, ...] = ()


@dataclass(frozen=True)
class WorkDetail:
    id: str
    name: str
    consumer_name: str
    version: int = 0
    created_at: str = ""
    updated_at: str = ""
    conditions: tuple[Condition, ...] = ()
    manifests: tuple[ManifestRef, ...] = ()
    resource_status: tuple[ResourceStatus, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Wire → dataclass
# ---------------------------------------------------------------------------

def _conditions(raw: Any) -> tuple[Condition, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(
        Condition(
            type=str(c.get("type", "")),
            status=str(c.get("status", "")),
            reason=str(c.get("reason") or ""),
            message=str(c.get("message") or ""),
        )
        for c in raw
        if isinstance(c, dict)
    )


def _status(wire: dict[str, Any]) -> dict[str, Any]:
    status = wire.get("status")
    return status if isinstance(status, dict) else {}


def bundle_name(wire: dict[str, Any]) -> str:
    """Display name of a bundle: explicit name, then metadata.name, then id."""
    metadata = wire.get("metadata") or {}
    return str(wire.get("name") or metadata.get("name") or wire.get("id", ""))


def consumer_from_wire(wire: dict[str, Any]) -> ConsumerRef:
    return ConsumerRef(id=str(wire.get("id", "")), name=str(wire.get("name", "")))


def summary_from_wire(wire: dict[str, Any], consumer_name: str = "") -> WorkSummary:
    return WorkSummary(
        id=str(wire.get("id", "")),
        name=bundle_name(wire),
        consumer_name=str(wire.get("consumer_name") or consumer_name),
        conditions=_conditions(_status(wire).get("conditions")),
    )


def bundle_to_detail(wire: dict[str, Any], consumer_name: str = "") -> WorkDetail:
    """Convert a wire resource bundle into a display-ready WorkDetail."""
    manifests = []
    for m in wire.get("manifests") or []:
        if not isinstance(m, dict):
            continue
        meta = m.get("metadata") or {}
        manifests.append(ManifestRef(
            kind=str(m.get("kind", "")),
            name=str(meta.get("name", "")),
            namespace=str(meta.get("namespace") or ""),
        ))

    resources = []
    for rs in _status(wire).get("resourceStatus") or []:
        if not isinstance(rs, dict):
            continue
        meta = rs.get("resourceMeta") or {}
        resources.append(ResourceStatus(
            kind=str(meta.get("kind") or ""),
            name=str(meta.get("name") or ""),
            namespace=str(meta.get("namespace") or ""),
            conditions=_conditions(rs.get("conditions")),
        ))

    try:
        version = int(wire.get("version") or 0)
    except (TypeError, ValueError):
        version = 0

    return WorkDetail(
        id=str(wire.get("id", "")),
        name=bundle_name(wire),
        consumer_name=str(wire.get("consumer_name") or consumer_name),
        version=version,
        created_at=str(wire.get("created_at") or ""),
        updated_at=str(wire.get("updated_at") or ""),
        conditions=_conditions(_status(wire).get("conditions")),
        manifests=tuple(manifests),
        resource_status=tuple(resources),
    )


def bundle_to_raw_map(wire: dict[str, Any], consumer_name: str = "") -> dict[str, Any]:
    """Canonical ManifestWork-shaped mapping of a bundle.

    Used for the JSON and YAML views and the clipboard. Key order is
    stable so both serializations read the same.
    """
    metadata: dict[str, Any] = {
        "name": bundle_name(wire),
        "namespace": wire.get("consumer_name") or consumer_name,
        "uid": wire.get("id", ""),
        "resourceVersion": str(wire.get("version", "")),
    }
    if wire.get("created_at"):
        metadata["creationTimestamp"] = wire["created_at"]
    extra = wire.get("metadata") or {}
    for key in ("labels", "annotations"):
        if extra.get(key):
            metadata[key] = extra[key]

    raw: dict[str, Any] = {
        "apiVersion": WORK_API_VERSION,
        "kind": WORK_KIND,
        "metadata": metadata,
        "spec": {"workload": {"manifests": list(wire.get("manifests") or [])}},
    }
    if wire.get("manifest_configs"):
        raw["spec"]["manifestConfigs"] = wire["manifest_configs"]
    if wire.get("delete_option"):
        raw["spec"]["deleteOption"] = wire["delete_option"]
    status = _status(wire)
    if status:
        raw["status"] = status
    return raw


def serialize_detail(raw: dict[str, Any]) -> tuple[str, str]:
    """Plain JSON (2-space indent) and YAML renderings of a raw map."""
    json_text = json.dumps(raw, indent=2)
    yaml_text = yaml.safe_dump(raw, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return json_text, yaml_text


def work_flags(conditions: tuple[Condition, ...]) -> tuple[bool, bool]:
    """Return (applied, available) for a work-level condition list."""
    applied = any(c.type == "Applied" and c.is_true for c in conditions)
    available = any(c.type == "Available" and c.is_true for c in conditions)
    return applied, available

"""Command descriptors returned by ``update`` and their executors.

A command holds only what it needs (a read-only client handle plus ids or
names) and is executed off the event loop by ``run_command``, which always
returns exactly one completion event. ``ScheduleTick`` and ``Quit`` are
effects handled by the driver itself and never reach ``run_command``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import singledispatch
from typing import Any, Callable

import pyperclip
import requests

from ..client import WorkdeckClient
from ..config import ClientConfig
from ..exceptions import ClipboardError, WorkdeckError
from ..models import WorkSummary, bundle_to_detail, bundle_to_raw_map, serialize_detail
from .events import (
    ClipboardWritten,
    CommandFailed,
    Connected,
    ConsumerCreated,
    ConsumerDeleted,
    ConsumersLoaded,
    DetailLoaded,
    DetailOrigin,
    WorkDeleted,
    WorkLoaded,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Connect:
    config: ClientConfig
    client_factory: Callable[[ClientConfig], Any] = WorkdeckClient


@dataclass(frozen=True)
class LoadConsumers:
    client: Any


@dataclass(frozen=True)
class LoadWork:
    client: Any
    consumer_name: str


@dataclass(frozen=True)
class LoadDetail:
    client: Any
    summary: WorkSummary
    origin: DetailOrigin = DetailOrigin.SELECT


@dataclass(frozen=True)
class CreateConsumer:
    client: Any
    name: str


@dataclass(frozen=True)
class DeleteConsumer:
    client: Any
    consumer_id: str
    name: str


@dataclass(frozen=True)
class DeleteWork:
    client: Any
    work_id: str
    name: str


@dataclass(frozen=True)
class CopyToClipboard:
    text: str


@dataclass(frozen=True)
class ScheduleTick:
    """Deliver ``event`` back to ``update`` after ``delay`` seconds."""

    event: Any
    delay: float


@dataclass(frozen=True)
class Quit:
    pass


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------

def run_command(command: Any) -> Any:
    """Execute an I/O command and return its completion event.

    Backend and clipboard failures come back as ``CommandFailed``; anything
    else is a bug and propagates to the caller.
    """
    try:
        return _execute(command)
    except (WorkdeckError, requests.RequestException) as e:
        logger.warning('%s failed: %s', type(command).__name__, e)
        return CommandFailed(command=command, error=e)


@singledispatch
def _execute(command: Any) -> Any:
    raise TypeError(f'not an I/O command: {command!r}')


@_execute.register
def _(command: Connect) -> Connected:
    client = command.client_factory(command.config)
    consumers = client.health()
    logger.info('connected to %s (%d consumers)', command.config.http_endpoint, len(consumers))
    return Connected(client=client, consumers=tuple(consumers))


@_execute.register
def _(command: LoadConsumers) -> ConsumersLoaded:
    return ConsumersLoaded(consumers=tuple(command.client.consumers.list()))


@_execute.register
def _(command: LoadWork) -> WorkLoaded:
    work = command.client.bundles.list(command.consumer_name)
    return WorkLoaded(consumer_name=command.consumer_name, work=tuple(work))


@_execute.register
def _(command: LoadDetail) -> DetailLoaded:
    summary = command.summary
    wire = command.client.bundles.get(summary.id)
    raw_json, raw_yaml = serialize_detail(bundle_to_raw_map(wire, summary.consumer_name))
    return DetailLoaded(
        summary=summary,
        detail=bundle_to_detail(wire, summary.consumer_name),
        raw_json=raw_json,
        raw_yaml=raw_yaml,
        origin=command.origin,
    )


@_execute.register
def _(command: CreateConsumer) -> ConsumerCreated:
    return ConsumerCreated(consumer=command.client.consumers.create(command.name))


@_execute.register
def _(command: DeleteConsumer) -> ConsumerDeleted:
    command.client.consumers.delete(command.consumer_id)
    return ConsumerDeleted(consumer_id=command.consumer_id, name=command.name)


@_execute.register
def _(command: DeleteWork) -> WorkDeleted:
    command.client.bundles.delete(command.work_id)
    return WorkDeleted(work_id=command.work_id, name=command.name)


@_execute.register
def _(command: CopyToClipboard) -> ClipboardWritten:
    try:
        pyperclip.copy(command.text)
    except pyperclip.PyperclipException as e:
        raise ClipboardError(f'clipboard unavailable: {e}') from e
    return ClipboardWritten(chars=len(command.text))

"""Mapping of the remote loaded-scripts listing onto DAP sources."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
from typing import TYPE_CHECKING
from typing import Any

from logpoints.adapter.types import Emit

if TYPE_CHECKING:
    from collections.abc import Iterable

    from logpoints.protocol.messages import Source

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"\s*([+-]?[0-9]+)")


def parse_script_reference(source_id: Any) -> int | None:
    """Read the numeric source reference out of a remote ``sourceId``.

    Accepts what a lenient base-10 integer parse accepts: leading whitespace,
    an optional sign and at least one digit; anything after the digits is
    ignored.  Returns None when there is no number to read.
    """
    if source_id is None or isinstance(source_id, bool):
        return None
    if isinstance(source_id, int):
        return source_id

    match = _LEADING_INTEGER.match(str(source_id))
    if match is None:
        return None
    return int(match.group(1))


@dataclass(frozen=True)
class LoadedScript:
    """A script the remote debuggee has loaded."""

    name: str | None
    path: str | None
    source_reference: int | None = None

    @classmethod
    def from_entry(cls, entry: dict[str, Any]) -> LoadedScript:
        return cls(
            name=entry.get("name"),
            path=entry.get("path"),
            source_reference=parse_script_reference(entry.get("sourceId")),
        )

    def to_source(self) -> Source:
        source: dict[str, Any] = {}
        if self.name is not None:
            source["name"] = self.name
        if self.path is not None:
            source["path"] = self.path
        if self.source_reference is not None:
            source["sourceReference"] = self.source_reference
        return source  # type: ignore[return-value]


def loaded_source_events(entries: Iterable[dict[str, Any]]) -> tuple[Emit, ...]:
    """One ``loadedSource`` event per entry, in the order given."""
    events = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning("Skipping malformed loaded-script entry: %r", entry)
            continue
        script = LoadedScript.from_entry(entry)
        if script.source_reference is None:
            logger.debug("Script %s has no numeric source id", script.path or script.name)
        events.append(Emit("loadedSource", dict(script.to_source())))
    return tuple(events)

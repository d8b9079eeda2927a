from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .map_writer import MapWriter

logger = logging.getLogger(__name__)


@dataclass
class HostsMapEntry:
    key: str
    value: str = ""


def regex_filename(filename: str) -> str:
    """`/maps/_front001_host.map` -> `/maps/_front001_host_regex.map`."""
    head, dot, ext = filename.rpartition(".")
    if not dot or "/" in ext:
        return filename + "_regex"
    return f"{head}_regex.{ext}"


def wildcard_regex(base: str) -> str:
    hostname, sep, path = base.partition("/")
    key = "^[^.]+" + re.escape(hostname[1:])
    if sep:
        return key + re.escape(sep + path)
    return key + "$"


@dataclass
class HostsMap:
    """A named routing map with exact match and regex match entries."""

    match_file: str
    regex_file: str
    match: list[HostsMapEntry] = field(default_factory=list)
    regex: list[HostsMapEntry] = field(default_factory=list)

    def append_hostname(self, base: str, value: str) -> None:
        if base.startswith("*."):
            self.regex.append(HostsMapEntry(wildcard_regex(base), value))
        else:
            self.match.append(HostsMapEntry(base, value))

    def append_alias_name(self, base: str, value: str) -> None:
        if base:
            self.append_hostname(base, value)

    def append_alias_regex(self, base: str, value: str) -> None:
        if base:
            self.regex.append(HostsMapEntry(base, value))

    def append_path(self, path: str, id: str) -> None:
        self.match.append(HostsMapEntry(path, id))

    def append_item(self, item: str) -> None:
        self.match.append(HostsMapEntry(item))

    def lookup(self, key: str) -> str | None:
        """Exact match value of `key`, or None. Regex entries are not evaluated."""
        for entry in self.match:
            if entry.key == key:
                return entry.value
        return None

    def keys(self) -> list[str]:
        return [entry.key for entry in self.match]


@dataclass
class HostsMaps:
    items: list[HostsMap] = field(default_factory=list)

    def add_map(self, filename: str) -> HostsMap:
        hmap = HostsMap(match_file=filename, regex_file=regex_filename(filename))
        self.items.append(hmap)
        return hmap


def write_maps(maps: HostsMaps, writer: MapWriter) -> None:
    """Persist every map. The regex file is only written when the map has regex entries.

    Writer errors propagate and abort the remaining writes.
    """
    for hmap in maps.items:
        writer.write_output(hmap.match, hmap.match_file)
        if hmap.regex:
            writer.write_output(hmap.regex, hmap.regex_file)
    logger.debug("Wrote %d map(s)", len(maps.items))

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .maps import HostsMapEntry

logger = logging.getLogger(__name__)


class MapWriter(Protocol):
    def write_output(self, entries: Sequence[HostsMapEntry], filename: str) -> None: ...


def format_entries(entries: Sequence[HostsMapEntry]) -> str:
    lines: list[str] = []
    for entry in entries:
        if "\n" in entry.key or "\n" in entry.value:
            raise ValueError(f"Map entry must not contain a newline: {entry.key!r}")
        lines.append(f"{entry.key} {entry.value}" if entry.value else entry.key)
    return "".join(line + "\n" for line in lines)


def atomic_write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        Path(tmp_path).replace(path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


class MapFileWriter:
    """Writes map files to disk, one `<key> <value>` per line."""

    def __init__(self, *, skip_unchanged: bool = True) -> None:
        self.skip_unchanged = skip_unchanged
        self.written: list[str] = []

    def write_output(self, entries: Sequence[HostsMapEntry], filename: str) -> None:
        path = Path(filename)
        content = format_entries(entries)
        if self.skip_unchanged and path.exists():
            try:
                if path.read_text(encoding="utf-8") == content:
                    logger.debug("Unchanged %s", path)
                    return
            except OSError:
                pass
        atomic_write_text(path, content)
        self.written.append(filename)
        logger.debug("Wrote %s (%d entries)", path, len(entries))


class MemoryMapWriter:
    """Keeps rendered map content in memory, keyed by filename."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}

    def write_output(self, entries: Sequence[HostsMapEntry], filename: str) -> None:
        self.files[filename] = format_entries(entries)

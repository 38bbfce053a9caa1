"""Source line resolution and source link templating."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from .metadata import Anno, Attribute, Declaration, Entry, Key, Position

TargetKind = Literal["module", "function", "callback"]

PATH_PLACEHOLDER = "%{path}"
LINE_PLACEHOLDER = "%{line}"


def anno_line(anno: Anno) -> int:
    """Reduce a plain line number or a Position annotation to a line number."""
    if isinstance(anno, Position):
        return anno.line
    return anno


def _matches(entry: Entry, target: TargetKind, key) -> bool:
    if target == "function":
        return isinstance(entry, Declaration) and (entry.name, entry.arity) == key
    if not isinstance(entry, Attribute):
        return False
    if target == "module":
        return entry.name == "module" and entry.value == key
    # callback attributes carry ((name, arity), specs)
    value = entry.value
    return (
        entry.name == "callback"
        and isinstance(value, tuple)
        and len(value) > 0
        and isinstance(value[0], (tuple, list))
        and tuple(value[0]) == key
    )


def find_line(entries: Iterable[Entry], target: TargetKind, key: str | Key) -> int | None:
    """Return the line of the first entry matching `key`, or None.

    `key` is the module identifier for "module" targets and the mangled
    (name, arity) pair for "function" and "callback" targets.
    """
    for entry in entries:
        if _matches(entry, target, key):
            return anno_line(entry.anno)
    return None


def source_link(source_path: str, url_pattern: str | None, line: int | None) -> str | None:
    """Substitute path and line into the URL pattern. No pattern, no link."""
    if url_pattern is None:
        return None
    url = url_pattern.replace(PATH_PLACEHOLDER, source_path)
    return url.replace(LINE_PLACEHOLDER, "" if line is None else str(line))


@dataclass(frozen=True)
class SourceLocator:
    """Resolves lines and links for the declarations of one module."""

    entries: tuple[Entry, ...]
    source_path: str
    url_pattern: str | None = None

    def line(self, target: TargetKind, key: str | Key, fallback: int | None = None) -> int | None:
        found = find_line(self.entries, target, key)
        return fallback if found is None else found

    def link(self, line: int | None) -> str | None:
        return source_link(self.source_path, self.url_pattern, line)

"""Ordered stack of named surfaces; only the top one is visible.

The stack itself does not protect the home entry: callers check
len() > 1 before popping. ModeDispatcher is the only caller that pops.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class PageEntry:
    name: str
    surface: Any


class PageStack:
    def __init__(self):
        self._entries: list[PageEntry] = []

    def push(self, name: str, surface) -> None:
        self._entries.append(PageEntry(name, surface))

    def pop(self) -> str:
        """Remove the top entry and return its name ("" if already empty)."""
        if not self._entries:
            return ""
        return self._entries.pop().name

    def switch_to(self, name: str, surface) -> None:
        """Collapse to a single frame holding name.

        Resource-to-resource navigation never builds a back-stack; only
        detail pushes add depth above this frame.
        """
        self._entries = [PageEntry(name, surface)]

    def top(self) -> str:
        return self._entries[-1].name if self._entries else ""

    def top_entry(self) -> PageEntry | None:
        return self._entries[-1] if self._entries else None

    def has_page(self, name: str) -> bool:
        return any(entry.name == name for entry in self._entries)

    def entries(self) -> list[PageEntry]:
        return list(self._entries)

    def names(self) -> list[str]:
        return [entry.name for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

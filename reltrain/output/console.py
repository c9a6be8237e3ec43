"""Console output abstraction.

Release components report progress through ConsoleProtocol rather than a
logging library. RichConsole is the production backend, MockConsole captures
output for tests, and PhaseConsole tags lines with the phase that produced
them so the interleaved output of the concurrent phases stays readable.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from rich.text import Text

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PhaseConsole",
    "RichConsole",
    "Style",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    BOLD = auto()
    HEADER = auto()

    def __str__(self) -> str:
        return self.name.lower()


class ConsoleProtocol(Protocol):
    """Protocol for console output.

    Implementations must tolerate calls from more than one thread.
    """

    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def header(self, message: str) -> None: ...


class RichConsole:
    """Console implementation using Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console(highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red bold",
            Style.WARNING: "yellow",
            Style.INFO: "cyan",
            Style.DIM: "dim",
            Style.BOLD: "bold",
            Style.HEADER: "blue bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def _prefixed(self, prefix: str, style: str, message: str) -> None:
        # Messages carry phase tags and remote text; never parse them as markup.
        self._console.print(Text.assemble((prefix, style), " ", message))

    def success(self, message: str) -> None:
        self._prefixed("OK", "green", message)

    def error(self, message: str) -> None:
        self._prefixed("error:", "red bold", message)

    def warning(self, message: str) -> None:
        self._prefixed("warning:", "yellow", message)

    def info(self, message: str) -> None:
        self._prefixed("info:", "cyan", message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(Text(message, style="blue bold"))


@dataclass(frozen=True, slots=True)
class PhaseConsole:
    """Prefix every line with a phase label, e.g. ``[merge]``."""

    inner: ConsoleProtocol
    phase: str

    def _tag(self, message: str) -> str:
        return f"[{self.phase}] {message}"

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.inner.print(self._tag(message), style)

    def success(self, message: str) -> None:
        self.inner.success(self._tag(message))

    def error(self, message: str) -> None:
        self.inner.error(self._tag(message))

    def warning(self, message: str) -> None:
        self.inner.warning(self._tag(message))

    def info(self, message: str) -> None:
        self.inner.info(self._tag(message))

    def header(self, message: str) -> None:
        self.inner.header(self._tag(message))


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console implementation that captures output for testing."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def _add(self, message: str, style: Style) -> None:
        with self._lock:
            self.outputs.append(OutputRecord(message, style))

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._add(message, style)

    def success(self, message: str) -> None:
        self._add(f"OK {message}", Style.SUCCESS)

    def error(self, message: str) -> None:
        self._add(f"error: {message}", Style.ERROR)

    def warning(self, message: str) -> None:
        self._add(f"warning: {message}", Style.WARNING)

    def info(self, message: str) -> None:
        self._add(f"info: {message}", Style.INFO)

    def header(self, message: str) -> None:
        self._add(message, Style.HEADER)

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]

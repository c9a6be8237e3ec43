"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    PhaseConsole,
    RichConsole,
    Style,
)
from .report import (
    print_release_status,
    print_train_error,
    print_train_report,
    train_error_exit_code,
    train_exit_code,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PhaseConsole",
    "RichConsole",
    "Style",
    "print_release_status",
    "print_train_error",
    "print_train_report",
    "train_error_exit_code",
    "train_exit_code",
]

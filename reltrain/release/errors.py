"""Error types for the release train."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from reltrain.remote.gateways import GatewayError

TrainErrorKind = Literal[
    "config_invalid",
    "trunk_missing",
    "version_file_invalid",
    "branch_create_failed",
    "push_rejected",
    "onboarding_timeout",
    "gateway_failed",
]

# Kinds that mean the environment itself is wrong; the run stops at once.
CONFIG_KINDS: frozenset[str] = frozenset(
    {"config_invalid", "trunk_missing", "version_file_invalid"}
)


@dataclass(frozen=True, slots=True)
class TrainError:
    kind: TrainErrorKind
    message: str
    hint: str | None = None

    @property
    def is_config_error(self) -> bool:
        return self.kind in CONFIG_KINDS

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def gateway_failed(error: GatewayError, *, message: str) -> TrainError:
    return TrainError(kind="gateway_failed", message=message, hint=str(error))

"""Error codes for CLI exit status.

These values are used as process exit codes and should remain stable.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success
    - 1: User error (bad arguments)
    - 2: Configuration error (bad config, trunk missing, malformed version file)
    - 3: Phase failure (build or merge phase did not succeed)
    - 4: Network error (remote service unreachable or rejected a request)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    PHASE_FAILED = 3
    NETWORK_ERROR = 4

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

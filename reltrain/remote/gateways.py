"""Gateway protocols for the remote repository and build service.

The release engine only talks to these protocols. AzureRepositoryGateway and
AzureBuildGateway bind them to REST; FakeRepository and FakeBuildService keep
state in memory for tests.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from typing import Literal, Protocol

from reltrain.core.result import Result

__all__ = [
    "ZERO_OBJECT_ID",
    "BranchRef",
    "BuildDefinition",
    "BuildGateway",
    "BuildRun",
    "CommitRecord",
    "Connect",
    "DiffSummary",
    "GatewayError",
    "PullRequestRecord",
    "RemoteClients",
    "RepositoryGateway",
    "RevisionType",
]

# Precondition for "this ref must not exist yet".
ZERO_OBJECT_ID = "0" * 40

RevisionType = Literal["branch", "commit"]


@dataclass(frozen=True, slots=True)
class GatewayError:
    """A failed gateway operation.

    Attributes:
        operation: Short name of the call, e.g. "push" or "list_branches"
        message: Human-readable reason
        status: HTTP status when the transport reported one, else 0
    """

    operation: str
    message: str
    status: int = 0

    def __str__(self) -> str:
        if self.status:
            return f"{self.operation}: HTTP {self.status}: {self.message}"
        return f"{self.operation}: {self.message}"


@dataclass(frozen=True, slots=True)
class BranchRef:
    name: str  # short name, without refs/heads/
    object_id: str


@dataclass(frozen=True, slots=True)
class CommitRecord:
    commit_id: str
    timestamp: datetime | None
    comment: str
    change_count: int

    @property
    def short_id(self) -> str:
        return self.commit_id[:8]


@dataclass(frozen=True, slots=True)
class PullRequestRecord:
    id: int
    status: str
    source_branch: str
    target_branch: str
    merge_status: str | None


@dataclass(frozen=True, slots=True)
class DiffSummary:
    """Commit diff from a base branch to a target branch."""

    ahead_count: int
    behind_count: int
    changed_paths: tuple[str, ...]
    target_commit: str


@dataclass(frozen=True, slots=True)
class BuildDefinition:
    id: int
    name: str
    path: str


@dataclass(frozen=True, slots=True)
class BuildRun:
    id: int
    status: str


class RepositoryGateway(Protocol):
    def list_branches(self, name: str) -> Result[list[BranchRef], GatewayError]: ...

    def create_branch(
        self, name: str, old_object_id: str, new_object_id: str
    ) -> Result[None, GatewayError]: ...

    def get_file(
        self, revision_type: RevisionType, revision: str, path: str
    ) -> Result[str, GatewayError]: ...

    def list_commits(
        self, branch: str, path: str, from_time: datetime, to_time: datetime
    ) -> Result[list[CommitRecord], GatewayError]: ...

    def push(
        self, branch: str, old_object_id: str, comment: str, path: str, content: str
    ) -> Result[None, GatewayError]: ...

    def list_pull_requests(
        self, target: str, source: str, status: str = "active"
    ) -> Result[list[PullRequestRecord], GatewayError]: ...

    def submit_pull_request(
        self, source: str, target: str, title: str, description: str
    ) -> Result[None, GatewayError]: ...

    def diff(self, base: str, target: str) -> Result[DiffSummary, GatewayError]: ...

    def complete_pull_request(
        self,
        pr_id: int,
        last_merge_source_commit: str,
        message: str,
        *,
        squash: bool,
        bypass_policy: bool,
        delete_source_branch: bool,
    ) -> Result[None, GatewayError]: ...


class BuildGateway(Protocol):
    def list_definitions(
        self, path: str, name: str
    ) -> Result[list[BuildDefinition], GatewayError]: ...

    def queue_onboarding_build(
        self, definition_id: int, source_branch: str, parameters: dict[str, str]
    ) -> Result[None, GatewayError]: ...

    def list_builds(self, definition_id: int) -> Result[list[BuildRun], GatewayError]: ...

    def queue_build(self, definition_id: int, source_branch: str) -> Result[None, GatewayError]: ...


@dataclass(frozen=True, slots=True)
class RemoteClients:
    """One set of gateway handles. Each concurrent phase gets its own."""

    repository: RepositoryGateway
    builds: BuildGateway


Connect = Callable[[], RemoteClients]

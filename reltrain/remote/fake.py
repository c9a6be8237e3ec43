"""In-memory gateways.

FakeRepository models branches as pointers to commits and keeps a file tree
per commit, so fork, push and squash-merge behave like the real service:
a create fails when the branch exists, a push fails when the head moved, and
a completion fails when the source branch moved past the expected commit.
Every call is recorded for assertions.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import dataclass, field
from datetime import datetime

from reltrain.core.result import Err, Ok, Result
from reltrain.remote.gateways import (
    ZERO_OBJECT_ID,
    BranchRef,
    BuildDefinition,
    BuildRun,
    CommitRecord,
    DiffSummary,
    GatewayError,
    PullRequestRecord,
    RevisionType,
)

__all__ = ["FakeBuildService", "FakeRepository", "PushRecord", "QueuedBuild"]


@dataclass(frozen=True, slots=True)
class PushRecord:
    branch: str
    old_object_id: str
    comment: str
    path: str
    content: str


@dataclass(frozen=True, slots=True)
class _BranchCommit:
    branch: str
    path: str
    record: CommitRecord


class FakeRepository:
    """RepositoryGateway kept in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._ids = itertools.count(1)
        self.branches: dict[str, str] = {}
        self.trees: dict[str, dict[str, str]] = {}
        self.history: list[_BranchCommit] = []
        self.pull_requests: list[PullRequestRecord] = []
        self.diffs: dict[tuple[str, str], DiffSummary] = {}
        self.failures: dict[str, GatewayError] = {}
        self.calls: list[str] = []
        self.pushes: list[PushRecord] = []
        self.completions: list[tuple[int, str, str]] = []
        # When False, submitted pull requests never become visible.
        self.index_submitted_prs = True
        self.clock: datetime | None = None

    # -- setup helpers -----------------------------------------------------

    def _new_commit_id(self) -> str:
        return f"{next(self._ids):040x}"

    def add_branch(self, name: str, files: dict[str, str]) -> str:
        """Create a branch pointing at a fresh commit holding files."""
        commit_id = self._new_commit_id()
        self.trees[commit_id] = dict(files)
        self.branches[name] = commit_id
        return commit_id

    def add_commit(
        self,
        branch: str,
        path: str,
        content: str,
        *,
        comment: str = "edit",
        timestamp: datetime | None = None,
    ) -> str:
        """Advance branch by one commit that rewrites path."""
        parent = self.branches[branch]
        commit_id = self._new_commit_id()
        tree = dict(self.trees[parent])
        tree[path] = content
        self.trees[commit_id] = tree
        self.branches[branch] = commit_id
        record = CommitRecord(
            commit_id=commit_id,
            timestamp=timestamp if timestamp is not None else self.clock,
            comment=comment,
            change_count=1,
        )
        self.history.append(_BranchCommit(branch=branch, path=path, record=record))
        return commit_id

    def set_diff(self, base: str, target: str, summary: DiffSummary) -> None:
        self.diffs[(base, target)] = summary

    def add_pull_request(self, source: str, target: str, *, status: str = "active") -> int:
        pr_id = len(self.pull_requests) + 1
        self.pull_requests.append(
            PullRequestRecord(
                id=pr_id,
                status=status,
                source_branch=source,
                target_branch=target,
                merge_status="succeeded",
            )
        )
        return pr_id

    def count(self, operation: str) -> int:
        return sum(1 for c in self.calls if c == operation)

    def _enter(self, operation: str) -> GatewayError | None:
        self.calls.append(operation)
        return self.failures.get(operation)

    # -- RepositoryGateway -------------------------------------------------

    def list_branches(self, name: str) -> Result[list[BranchRef], GatewayError]:
        with self._lock:
            if (failure := self._enter("list_branches")) is not None:
                return Err(failure)
            return Ok(
                [
                    BranchRef(name=b, object_id=head)
                    for b, head in sorted(self.branches.items())
                    if b.startswith(name)
                ]
            )

    def create_branch(
        self, name: str, old_object_id: str, new_object_id: str
    ) -> Result[None, GatewayError]:
        with self._lock:
            if (failure := self._enter("create_branch")) is not None:
                return Err(failure)
            current = self.branches.get(name, ZERO_OBJECT_ID)
            if current != old_object_id:
                return Err(GatewayError(operation="create_branch", message="staleRef"))
            if new_object_id not in self.trees:
                return Err(GatewayError(operation="create_branch", message="unknown commit"))
            self.branches[name] = new_object_id
            return Ok(None)

    def get_file(
        self, revision_type: RevisionType, revision: str, path: str
    ) -> Result[str, GatewayError]:
        with self._lock:
            if (failure := self._enter("get_file")) is not None:
                return Err(failure)
            commit_id = self.branches.get(revision) if revision_type == "branch" else revision
            tree = self.trees.get(commit_id or "")
            if tree is None or path not in tree:
                return Err(
                    GatewayError(
                        operation="get_file",
                        message=f"{path} not found at {revision_type} {revision}",
                        status=404,
                    )
                )
            return Ok(tree[path])

    def list_commits(
        self, branch: str, path: str, from_time: datetime, to_time: datetime
    ) -> Result[list[CommitRecord], GatewayError]:
        with self._lock:
            if (failure := self._enter("list_commits")) is not None:
                return Err(failure)
            out: list[CommitRecord] = []
            for entry in self.history:
                if entry.branch != branch or entry.path != path:
                    continue
                ts = entry.record.timestamp
                if ts is not None and not (from_time <= ts <= to_time):
                    continue
                out.append(entry.record)
            return Ok(out)

    def push(
        self, branch: str, old_object_id: str, comment: str, path: str, content: str
    ) -> Result[None, GatewayError]:
        with self._lock:
            if (failure := self._enter("push")) is not None:
                return Err(failure)
            self.pushes.append(PushRecord(branch, old_object_id, comment, path, content))
            if self.branches.get(branch) != old_object_id:
                return Err(
                    GatewayError(operation="push", message="branch head moved", status=409)
                )
            self.add_commit(branch, path, content, comment=comment)
            return Ok(None)

    def list_pull_requests(
        self, target: str, source: str, status: str = "active"
    ) -> Result[list[PullRequestRecord], GatewayError]:
        with self._lock:
            if (failure := self._enter("list_pull_requests")) is not None:
                return Err(failure)
            return Ok(
                [
                    pr
                    for pr in self.pull_requests
                    if pr.source_branch == source
                    and pr.target_branch == target
                    and pr.status == status
                ]
            )

    def submit_pull_request(
        self, source: str, target: str, title: str, description: str
    ) -> Result[None, GatewayError]:
        with self._lock:
            if (failure := self._enter("submit_pull_request")) is not None:
                return Err(failure)
            if self.index_submitted_prs:
                self.add_pull_request(source, target)
            return Ok(None)

    def diff(self, base: str, target: str) -> Result[DiffSummary, GatewayError]:
        with self._lock:
            if (failure := self._enter("diff")) is not None:
                return Err(failure)
            summary = self.diffs.get((base, target))
            if summary is not None:
                return Ok(summary)
            # Without an explicit summary, every commit recorded on target counts as ahead.
            ahead = [e for e in self.history if e.branch == target]
            return Ok(
                DiffSummary(
                    ahead_count=len(ahead),
                    behind_count=0,
                    changed_paths=tuple(dict.fromkeys(e.path for e in ahead)),
                    target_commit=self.branches.get(target, ZERO_OBJECT_ID),
                )
            )

    def complete_pull_request(
        self,
        pr_id: int,
        last_merge_source_commit: str,
        message: str,
        *,
        squash: bool,
        bypass_policy: bool,
        delete_source_branch: bool,
    ) -> Result[None, GatewayError]:
        with self._lock:
            if (failure := self._enter("complete_pull_request")) is not None:
                return Err(failure)
            match = [pr for pr in self.pull_requests if pr.id == pr_id]
            if not match:
                return Err(
                    GatewayError(
                        operation="complete_pull_request", message="no such PR", status=404
                    )
                )
            pr = match[0]
            if self.branches.get(pr.source_branch) != last_merge_source_commit:
                return Err(
                    GatewayError(
                        operation="complete_pull_request",
                        message="source branch moved",
                        status=409,
                    )
                )
            self.completions.append((pr_id, last_merge_source_commit, message))
            self.pull_requests = [
                PullRequestRecord(
                    id=p.id,
                    status="completed" if p.id == pr_id else p.status,
                    source_branch=p.source_branch,
                    target_branch=p.target_branch,
                    merge_status=p.merge_status,
                )
                for p in self.pull_requests
            ]
            source_tree = self.trees[last_merge_source_commit]
            target_head = self.branches[pr.target_branch]
            commit_id = self._new_commit_id()
            tree = dict(self.trees[target_head])
            tree.update(source_tree)
            self.trees[commit_id] = tree
            self.branches[pr.target_branch] = commit_id
            if delete_source_branch:
                del self.branches[pr.source_branch]
            return Ok(None)


@dataclass(frozen=True, slots=True)
class QueuedBuild:
    definition_id: int
    source_branch: str
    parameters: dict[str, str] | None


@dataclass
class FakeBuildService:
    """BuildGateway kept in memory.

    ``onboarding_polls`` controls how many list_definitions calls after an
    onboarding build it takes for the provisioned definition to appear
    (None means it never appears).
    """

    definitions: list[BuildDefinition] = field(default_factory=list)
    builds: dict[int, list[BuildRun]] = field(default_factory=dict)
    onboarding_polls: int | None = 1
    provisioned: BuildDefinition | None = None
    failures: dict[str, GatewayError] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)
    queued: list[QueuedBuild] = field(default_factory=list)
    _pending: int | None = None

    def count(self, operation: str) -> int:
        return sum(1 for c in self.calls if c == operation)

    def list_definitions(self, path: str, name: str) -> Result[list[BuildDefinition], GatewayError]:
        self.calls.append("list_definitions")
        if (failure := self.failures.get("list_definitions")) is not None:
            return Err(failure)
        if self._pending is not None:
            self._pending -= 1
            if self._pending <= 0 and self.provisioned is not None:
                self.definitions.append(self.provisioned)
                self._pending = None
        return Ok([d for d in self.definitions if d.path == path])

    def queue_onboarding_build(
        self, definition_id: int, source_branch: str, parameters: dict[str, str]
    ) -> Result[None, GatewayError]:
        self.calls.append("queue_onboarding_build")
        if (failure := self.failures.get("queue_onboarding_build")) is not None:
            return Err(failure)
        self.queued.append(QueuedBuild(definition_id, source_branch, dict(parameters)))
        if self.onboarding_polls is not None:
            self._pending = self.onboarding_polls
        return Ok(None)

    def list_builds(self, definition_id: int) -> Result[list[BuildRun], GatewayError]:
        self.calls.append("list_builds")
        if (failure := self.failures.get("list_builds")) is not None:
            return Err(failure)
        return Ok(list(self.builds.get(definition_id, [])))

    def queue_build(self, definition_id: int, source_branch: str) -> Result[None, GatewayError]:
        self.calls.append("queue_build")
        if (failure := self.failures.get("queue_build")) is not None:
            return Err(failure)
        self.queued.append(QueuedBuild(definition_id, source_branch, None))
        runs = self.builds.setdefault(definition_id, [])
        runs.append(BuildRun(id=len(runs) + 1, status="notStarted"))
        return Ok(None)

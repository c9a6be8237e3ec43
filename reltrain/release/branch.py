from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from reltrain.core.config import ReleaseConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import ConsoleProtocol, Style
from reltrain.release.cycle import release_branch_name
from reltrain.release.errors import TrainError, gateway_failed
from reltrain.remote.gateways import ZERO_OBJECT_ID, BranchRef, RepositoryGateway


@dataclass(frozen=True, slots=True)
class ReleaseBranch:
    name: str
    head_commit_id: str
    # True when this run forked the branch from trunk.
    created: bool = False

    @property
    def short_head(self) -> str:
        return self.head_commit_id[:8]


class ReleaseBranchResolver:
    """Find this cycle's release branch, forking it from trunk if absent."""

    def __init__(
        self,
        *,
        repository: RepositoryGateway,
        release: ReleaseConfig,
        console: ConsoleProtocol,
    ) -> None:
        self._repo = repository
        self._release = release
        self._console = console

    def branch_name(self, now: datetime) -> str:
        return release_branch_name(self._release.branch_prefix, now)

    def find(self, name: str) -> Result[BranchRef | None, TrainError]:
        """Look up a branch by exact name; prefix hits such as hotfix branches don't count."""
        refs = self._repo.list_branches(name)
        if isinstance(refs, Err):
            return Err(gateway_failed(refs.error, message=f"failed to look up branch {name}"))
        for ref in refs.value:
            if ref.name == name:
                return Ok(ref)
        return Ok(None)

    def trunk_head(self) -> Result[str, TrainError]:
        trunk = self._release.trunk_branch
        refs = self._repo.list_branches(trunk)
        if isinstance(refs, Err):
            return Err(gateway_failed(refs.error, message=f"failed to look up trunk {trunk}"))

        self._console.print(f"{trunk} refs: {len(refs.value)}", Style.DIM)
        for ref in refs.value:
            if ref.name == trunk:
                return Ok(ref.object_id)
        return Err(
            TrainError(
                kind="trunk_missing",
                message=f"trunk branch not found: {trunk}",
                hint="check release.trunk_branch in the config",
            )
        )

    def resolve(self, now: datetime) -> Result[ReleaseBranch, TrainError]:
        name = self.branch_name(now)
        self._console.print(f"release branch: {name}", Style.DIM)

        existing = self.find(name)
        if isinstance(existing, Err):
            return existing
        if existing.value is not None:
            self._console.print("release branch exists", Style.DIM)
            return Ok(ReleaseBranch(name=name, head_commit_id=existing.value.object_id))

        head = self.trunk_head()
        if isinstance(head, Err):
            return head

        created = self._repo.create_branch(name, ZERO_OBJECT_ID, head.value)
        if isinstance(created, Ok):
            self._console.success(f"forked {name} from {self._release.trunk_branch}")
            return Ok(ReleaseBranch(name=name, head_commit_id=head.value, created=True))

        # Another run may have forked the branch first.
        self._console.warning(f"create {name} failed ({created.error}); re-resolving")
        again = self.find(name)
        if isinstance(again, Err):
            return again
        if again.value is None:
            return Err(
                TrainError(
                    kind="branch_create_failed",
                    message=f"failed to create release branch {name}",
                    hint=str(created.error),
                )
            )
        return Ok(ReleaseBranch(name=name, head_commit_id=again.value.object_id))

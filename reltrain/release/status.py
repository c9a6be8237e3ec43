"""Read-only view of where this cycle's release stands."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from reltrain.core.config import TrainConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import ConsoleProtocol
from reltrain.release.branch import ReleaseBranchResolver
from reltrain.release.errors import TrainError
from reltrain.release.version import VersionDescriptor
from reltrain.release.version_state import VersionStateMachine
from reltrain.remote.gateways import RemoteClients


@dataclass(frozen=True, slots=True)
class ReleaseStatus:
    branch: str
    head_commit_id: str | None
    branch_version: VersionDescriptor | None
    trunk_version: VersionDescriptor

    @property
    def exists(self) -> bool:
        return self.head_commit_id is not None

    @property
    def reset_pending(self) -> bool:
        return self.branch_version is not None and not self.branch_version.is_reset

    @property
    def merge_pending(self) -> bool:
        if self.branch_version is None:
            return False
        return self.branch_version.build != self.trunk_version.build


def probe_release_status(
    *,
    config: TrainConfig,
    clients: RemoteClients,
    console: ConsoleProtocol,
    now: datetime,
) -> Result[ReleaseStatus, TrainError]:
    resolver = ReleaseBranchResolver(
        repository=clients.repository, release=config.release, console=console
    )
    machine = VersionStateMachine(
        repository=clients.repository, release=config.release, console=console
    )

    name = resolver.branch_name(now)
    ref = resolver.find(name)
    if isinstance(ref, Err):
        return ref

    trunk = machine.read_version("branch", config.release.trunk_branch)
    if isinstance(trunk, Err):
        return trunk

    if ref.value is None:
        return Ok(
            ReleaseStatus(
                branch=name,
                head_commit_id=None,
                branch_version=None,
                trunk_version=trunk.value.version,
            )
        )

    doc = machine.read_version("branch", name)
    if isinstance(doc, Err):
        return doc

    return Ok(
        ReleaseStatus(
            branch=name,
            head_commit_id=ref.value.object_id,
            branch_version=doc.value.version,
            trunk_version=trunk.value.version,
        )
    )

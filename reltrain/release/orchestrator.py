"""Run the weekly release train end to end.

Branch and version are settled first, in order; both later phases need the
final version. Build and merge then run in parallel, each with its own
gateway handles and the branch name and expected build as read-only inputs.
Neither cancels the other; the run succeeds only if both succeed.
"""

from __future__ import annotations

from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime

from reltrain.core.config import TrainConfig
from reltrain.core.result import Err
from reltrain.output.console import ConsoleProtocol, PhaseConsole
from reltrain.release.branch import ReleaseBranch, ReleaseBranchResolver
from reltrain.release.build_trigger import BuildTrigger
from reltrain.release.errors import TrainError
from reltrain.release.merge import MasterMergeCoordinator
from reltrain.release.onboarding import BuildDefinitionOnboarder
from reltrain.release.version_state import VersionOutcome, VersionStateMachine
from reltrain.remote.gateways import Connect


@dataclass(frozen=True, slots=True)
class PhaseReport:
    name: str
    ok: bool
    detail: str
    error: TrainError | None = None


@dataclass(frozen=True, slots=True)
class TrainReport:
    phases: tuple[PhaseReport, ...]
    branch: ReleaseBranch | None = None
    version: VersionOutcome | None = None
    # Set when the sequential phase stopped the run.
    fatal: TrainError | None = None

    @property
    def ok(self) -> bool:
        return self.fatal is None and all(p.ok for p in self.phases)

    def phase(self, name: str) -> PhaseReport | None:
        for p in self.phases:
            if p.name == name:
                return p
        return None


def _failed(name: str, error: TrainError) -> PhaseReport:
    return PhaseReport(name=name, ok=False, detail=error.pretty(), error=error)


def _collect(name: str, future: Future[PhaseReport]) -> PhaseReport:
    """Unwrap a phase result; an unexpected exception fails that phase only."""
    try:
        return future.result()
    except Exception as e:
        return PhaseReport(name=name, ok=False, detail=f"phase crashed: {e!r}")


class Orchestrator:
    def __init__(self, *, config: TrainConfig, connect: Connect, console: ConsoleProtocol) -> None:
        self._config = config
        self._connect = connect
        self._console = console

    def _build_phase(self, branch: str) -> PhaseReport:
        console = PhaseConsole(self._console, "build")
        clients = self._connect()
        onboarder = BuildDefinitionOnboarder(
            builds=clients.builds,
            build=self._config.build,
            release=self._config.release,
            console=console,
        )
        definition_id = onboarder.ensure(branch)
        if isinstance(definition_id, Err):
            return _failed("build", definition_id.error)

        trigger = BuildTrigger(builds=clients.builds, console=console)
        outcome = trigger.ensure(branch, definition_id.value)
        if isinstance(outcome, Err):
            return _failed("build", outcome.error)

        if outcome.value.kind == "triggered":
            detail = f"queued build for definition {definition_id.value}"
        else:
            detail = (
                f"definition {definition_id.value} already has "
                f"{outcome.value.existing_builds} build(s)"
            )
        return PhaseReport(name="build", ok=True, detail=detail)

    def _merge_phase(self, branch: str, expected_build: int) -> PhaseReport:
        console = PhaseConsole(self._console, "merge")
        clients = self._connect()
        coordinator = MasterMergeCoordinator(
            repository=clients.repository,
            release=self._config.release,
            console=console,
        )
        outcome = coordinator.ensure(self._config.release.trunk_branch, branch, expected_build)
        if isinstance(outcome, Err):
            return _failed("merge", outcome.error)

        match outcome.value.kind:
            case "not_needed":
                return PhaseReport(
                    name="merge", ok=True, detail=f"trunk already on build {expected_build}"
                )
            case "merged":
                return PhaseReport(name="merge", ok=True, detail=f"merged PR {outcome.value.pr_id}")
            case _:
                return PhaseReport(
                    name="merge",
                    ok=False,
                    detail=f"aborted ({outcome.value.reason}): {outcome.value.detail}",
                )

    def run(self, now: datetime) -> TrainReport:
        clients = self._connect()
        release = self._config.release

        resolver = ReleaseBranchResolver(
            repository=clients.repository, release=release, console=self._console
        )
        branch = resolver.resolve(now)
        if isinstance(branch, Err):
            return TrainReport(phases=(_failed("branch", branch.error),), fatal=branch.error)

        branch_report = PhaseReport(
            name="branch",
            ok=True,
            detail=f"{'forked' if branch.value.created else 'found'} {branch.value.name} "
            f"at {branch.value.short_head}",
        )

        machine = VersionStateMachine(
            repository=clients.repository, release=release, console=self._console
        )
        version = machine.ensure_reset(branch.value.name, branch.value.head_commit_id, now)
        if isinstance(version, Err):
            return TrainReport(
                phases=(branch_report, _failed("version", version.error)),
                branch=branch.value,
                fatal=version.error,
            )

        outcome = version.value
        match outcome.kind:
            case "reset":
                detail = f"reset to {outcome.version}"
            case "already_reset":
                detail = f"already reset at {outcome.version}"
            case _:
                detail = f"left at {outcome.version} ({outcome.reason})"
        version_report = PhaseReport(name="version", ok=True, detail=detail)

        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="reltrain") as pool:
            build_future = pool.submit(self._build_phase, branch.value.name)
            merge_future = pool.submit(
                self._merge_phase, branch.value.name, outcome.expected_build
            )
            wait([build_future, merge_future])

        return TrainReport(
            phases=(
                branch_report,
                version_report,
                _collect("build", build_future),
                _collect("merge", merge_future),
            ),
            branch=branch.value,
            version=outcome,
        )

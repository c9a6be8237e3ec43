"""Release-state resolution and orchestration."""

from reltrain.release.branch import ReleaseBranch, ReleaseBranchResolver
from reltrain.release.build_trigger import BuildOutcome, BuildTrigger
from reltrain.release.errors import TrainError
from reltrain.release.merge import MasterMergeCoordinator, MergeOutcome
from reltrain.release.onboarding import BuildDefinitionOnboarder
from reltrain.release.orchestrator import Orchestrator, PhaseReport, TrainReport
from reltrain.release.version import VersionDescriptor, parse_version
from reltrain.release.version_state import VersionOutcome, VersionStateMachine

__all__ = [
    "BuildDefinitionOnboarder",
    "BuildOutcome",
    "BuildTrigger",
    "MasterMergeCoordinator",
    "MergeOutcome",
    "Orchestrator",
    "PhaseReport",
    "ReleaseBranch",
    "ReleaseBranchResolver",
    "TrainError",
    "TrainReport",
    "VersionDescriptor",
    "VersionOutcome",
    "VersionStateMachine",
    "parse_version",
]

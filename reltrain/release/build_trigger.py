from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import ConsoleProtocol, Style
from reltrain.release.errors import TrainError, gateway_failed
from reltrain.remote.gateways import BuildGateway


@dataclass(frozen=True, slots=True)
class BuildOutcome:
    kind: Literal["existing", "triggered"]
    definition_id: int
    existing_builds: int = 0


class BuildTrigger:
    """Queue one build per definition per cycle.

    Any existing build, whatever its status, counts. Failed builds are not
    retried here.
    """

    def __init__(self, *, builds: BuildGateway, console: ConsoleProtocol) -> None:
        self._builds = builds
        self._console = console

    def ensure(self, branch: str, definition_id: int) -> Result[BuildOutcome, TrainError]:
        runs = self._builds.list_builds(definition_id)
        if isinstance(runs, Err):
            return Err(
                gateway_failed(runs.error, message=f"failed to list builds of {definition_id}")
            )

        self._console.print(f"builds of definition {definition_id}: {len(runs.value)}", Style.DIM)
        if runs.value:
            return Ok(
                BuildOutcome(
                    kind="existing",
                    definition_id=definition_id,
                    existing_builds=len(runs.value),
                )
            )

        queued = self._builds.queue_build(definition_id, branch)
        if isinstance(queued, Err):
            return Err(gateway_failed(queued.error, message=f"failed to queue build for {branch}"))

        self._console.success(f"queued build of {branch} (definition {definition_id})")
        return Ok(BuildOutcome(kind="triggered", definition_id=definition_id))

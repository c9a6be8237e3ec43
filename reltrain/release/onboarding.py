"""Per-branch build definition onboarding.

The per-branch definition is not created directly: a fixed onboarding build
is queued with the repository and branch as parameters, and provisions the
definition as a side effect. We then poll until it shows up.
"""

from __future__ import annotations

from time import sleep

from reltrain.core.config import BuildConfig, ReleaseConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import ConsoleProtocol, Style
from reltrain.release.errors import TrainError, gateway_failed
from reltrain.release.timeouts import ONBOARDING_POLL_ATTEMPTS, ONBOARDING_POLL_DELAY_SECONDS
from reltrain.remote.gateways import BuildDefinition, BuildGateway


class BuildDefinitionOnboarder:
    def __init__(
        self,
        *,
        builds: BuildGateway,
        build: BuildConfig,
        release: ReleaseConfig,
        console: ConsoleProtocol,
    ) -> None:
        self._builds = builds
        self._build = build
        self._release = release
        self._console = console

    def _pick(self, definitions: list[BuildDefinition]) -> int:
        for definition in definitions:
            if definition.name == self._build.definition_name:
                return definition.id
        return definitions[0].id

    def _list(self, branch: str) -> Result[list[BuildDefinition], TrainError]:
        path = self._build.definition_path(branch)
        result = self._builds.list_definitions(path, self._build.definition_name)
        if isinstance(result, Err):
            message = f"failed to list definitions in {path}"
            return Err(gateway_failed(result.error, message=message))
        self._console.print(f"definitions in {path}: {len(result.value)}", Style.DIM)
        return result

    def ensure(self, branch: str) -> Result[int, TrainError]:
        found = self._list(branch)
        if isinstance(found, Err):
            return found
        if found.value:
            return Ok(self._pick(found.value))

        parameters = {
            "GitRepositoryName": self._build.onboarding_repository,
            "GitBranchName": branch,
        }
        queued = self._builds.queue_onboarding_build(
            self._build.onboarding_definition_id, self._release.trunk_branch, parameters
        )
        if isinstance(queued, Err):
            return Err(gateway_failed(queued.error, message="failed to queue onboarding build"))
        self._console.print(f"onboarding build definition for {branch}...", Style.DIM)

        for attempt in range(ONBOARDING_POLL_ATTEMPTS):
            sleep(ONBOARDING_POLL_DELAY_SECONDS)
            found = self._list(branch)
            if isinstance(found, Err):
                return found
            if found.value:
                self._console.success(f"build definition onboarded after {attempt + 1} polls")
                return Ok(self._pick(found.value))

        waited = int(ONBOARDING_POLL_ATTEMPTS * ONBOARDING_POLL_DELAY_SECONDS)
        return Err(
            TrainError(
                kind="onboarding_timeout",
                message=f"no build definition for {branch} after {waited} seconds",
                hint=self._build.definition_path(branch),
            )
        )

"""Once-per-cycle version reset of the release branch.

A pending reset (revision != 0) is applied only after scanning the cycle's
commits to the version file: if any of them carries a different build, an
earlier run already reset this cycle and nothing is written. The push itself
is conditioned on the head captured at resolve time, so a concurrent writer
makes it fail rather than double-apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from reltrain.core.config import ReleaseConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import ConsoleProtocol, Style
from reltrain.release.cycle import lookback_days, lookback_window
from reltrain.release.errors import TrainError, gateway_failed
from reltrain.release.version import VersionDescriptor, VersionDocument, parse_version_document
from reltrain.remote.gateways import RepositoryGateway, RevisionType

RESET_COMMENT = "Reset version for release"

VersionOutcomeKind = Literal["already_reset", "reset", "aborted"]


@dataclass(frozen=True, slots=True)
class VersionOutcome:
    kind: VersionOutcomeKind
    # The version downstream phases should expect; its build is the release build.
    version: VersionDescriptor
    reason: str | None = None

    @property
    def expected_build(self) -> int:
        return self.version.build


class VersionStateMachine:
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

    def read_version(
        self, revision_type: RevisionType, revision: str
    ) -> Result[VersionDocument, TrainError]:
        path = self._release.version_path
        text = self._repo.get_file(revision_type, revision, path)
        if isinstance(text, Err):
            return Err(
                gateway_failed(
                    text.error, message=f"failed to read {path} at {revision_type} {revision}"
                )
            )

        doc = parse_version_document(text.value)
        if isinstance(doc, Err):
            return Err(
                TrainError(
                    kind="version_file_invalid",
                    message=f"invalid version file at {revision_type} {revision}: {doc.error}",
                    hint=path,
                )
            )
        return doc

    def ensure_reset(
        self, branch: str, head_commit_id: str, now: datetime
    ) -> Result[VersionOutcome, TrainError]:
        doc = self.read_version("branch", branch)
        if isinstance(doc, Err):
            return doc

        current = doc.value.version
        self._console.print(f"{branch} version: {current}", Style.DIM)
        if current.is_reset:
            return Ok(VersionOutcome(kind="already_reset", version=current))

        from_time, to_time = lookback_window(now)
        commits = self._repo.list_commits(branch, self._release.version_path, from_time, to_time)
        if isinstance(commits, Err):
            return Err(gateway_failed(commits.error, message=f"failed to list commits on {branch}"))

        self._console.print(
            f"version commits in last {lookback_days(now)} days: {len(commits.value)}", Style.DIM
        )
        for commit in commits.value:
            at_commit = self.read_version("commit", commit.commit_id)
            if isinstance(at_commit, Err):
                return at_commit
            if at_commit.value.version.build != current.build:
                self._console.print(
                    f"commit {commit.short_id} has {at_commit.value.version}", Style.DIM
                )
                return Ok(
                    VersionOutcome(
                        kind="aborted",
                        version=current,
                        reason="found_prior_version",
                    )
                )

        new_version = current.reset()
        content = doc.value.render(new_version)
        if isinstance(content, Err):
            return Err(
                TrainError(
                    kind="version_file_invalid",
                    message=f"cannot rewrite version file: {content.error}",
                    hint=self._release.version_path,
                )
            )

        pushed = self._repo.push(
            branch, head_commit_id, RESET_COMMENT, self._release.version_path, content.value
        )
        if isinstance(pushed, Err):
            return Err(
                TrainError(
                    kind="push_rejected",
                    message=f"version reset push to {branch} failed",
                    hint=str(pushed.error),
                )
            )

        self._console.success(f"reset {branch} version {current} -> {new_version}")
        return Ok(VersionOutcome(kind="reset", version=new_version))

"""Propagate the release version bump back to trunk.

The bump travels through a pull request that is completed automatically,
bypassing branch policies. That is only safe when the release branch is
exactly one commit ahead of trunk and that commit touches nothing but the
version file, so both are checked right before completion.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from time import sleep
from typing import Literal

from reltrain.core.config import ReleaseConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import ConsoleProtocol, Style
from reltrain.release.errors import TrainError, gateway_failed
from reltrain.release.timeouts import PR_SETTLE_SECONDS
from reltrain.release.version import parse_version_document
from reltrain.remote.gateways import DiffSummary, PullRequestRecord, RepositoryGateway

PR_TITLE = "Merge release version back to trunk"
PR_DESCRIPTION = "Automated pull request: carries the weekly release version reset to trunk."
MERGE_MESSAGE = "Merge release version reset"

MergeOutcomeKind = Literal["not_needed", "merged", "aborted"]
MergeAbortReason = Literal[
    "no_pr_after_submit", "ambiguous_prs", "unsafe_diff", "unexpected_change"
]


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    kind: MergeOutcomeKind
    reason: MergeAbortReason | None = None
    detail: str | None = None
    pr_id: int | None = None


def _aborted(reason: MergeAbortReason, detail: str, pr_id: int | None = None) -> MergeOutcome:
    return MergeOutcome(kind="aborted", reason=reason, detail=detail, pr_id=pr_id)


def _normalize(path: str) -> str:
    return "/" + path.strip("/")


def is_under(path: str, root: str) -> bool:
    """True when path is root itself or lies beneath it."""
    p = _normalize(path)
    r = _normalize(root)
    return p == r or p.startswith(r.rstrip("/") + "/")


class MasterMergeCoordinator:
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

    def _trunk_build(self, trunk: str) -> Result[int, TrainError]:
        path = self._release.version_path
        text = self._repo.get_file("branch", trunk, path)
        if isinstance(text, Err):
            return Err(gateway_failed(text.error, message=f"failed to read {path} on {trunk}"))
        doc = parse_version_document(text.value)
        if isinstance(doc, Err):
            return Err(
                TrainError(
                    kind="version_file_invalid",
                    message=f"invalid version file on {trunk}: {doc.error}",
                    hint=path,
                )
            )
        return Ok(doc.value.version.build)

    def _active_prs(self, trunk: str, release: str) -> Result[list[PullRequestRecord], TrainError]:
        prs = self._repo.list_pull_requests(trunk, release, "active")
        if isinstance(prs, Err):
            message = f"failed to list PRs {release} -> {trunk}"
            return Err(gateway_failed(prs.error, message=message))
        self._console.print(f"active PRs {release} -> {trunk}: {len(prs.value)}", Style.DIM)
        return prs

    def _find_or_submit(
        self, trunk: str, release: str
    ) -> Result[PullRequestRecord | MergeOutcome, TrainError]:
        prs = self._active_prs(trunk, release)
        if isinstance(prs, Err):
            return prs

        if not prs.value:
            submitted = self._repo.submit_pull_request(release, trunk, PR_TITLE, PR_DESCRIPTION)
            if isinstance(submitted, Err):
                message = f"failed to submit PR {release} -> {trunk}"
                return Err(gateway_failed(submitted.error, message=message))
            self._console.print(f"submitted PR {release} -> {trunk}", Style.DIM)
            sleep(PR_SETTLE_SECONDS)

            prs = self._active_prs(trunk, release)
            if isinstance(prs, Err):
                return prs
            if not prs.value:
                return Ok(_aborted("no_pr_after_submit", "submitted PR is not listed"))

        if len(prs.value) > 1:
            ids = ", ".join(str(pr.id) for pr in prs.value)
            return Ok(_aborted("ambiguous_prs", f"{len(prs.value)} active PRs: {ids}"))
        return Ok(prs.value[0])

    def _check_diff(self, diff: DiffSummary) -> MergeOutcome | None:
        if diff.behind_count != 0 or diff.ahead_count != 1:
            return _aborted(
                "unsafe_diff",
                f"ahead {diff.ahead_count}, behind {diff.behind_count} (want ahead 1, behind 0)",
            )
        for path in diff.changed_paths:
            if not is_under(path, self._release.version_path):
                return _aborted("unexpected_change", f"changed path outside version file: {path}")
        return None

    def ensure(
        self, trunk: str, release: str, expected_build: int
    ) -> Result[MergeOutcome, TrainError]:
        trunk_build = self._trunk_build(trunk)
        if isinstance(trunk_build, Err):
            return trunk_build
        if trunk_build.value == expected_build:
            self._console.print(f"{trunk} already on build {expected_build}", Style.DIM)
            return Ok(MergeOutcome(kind="not_needed"))

        found = self._find_or_submit(trunk, release)
        if isinstance(found, Err):
            return found
        if isinstance(found.value, MergeOutcome):
            return Ok(found.value)
        pr = found.value

        diff = self._repo.diff(trunk, release)
        if isinstance(diff, Err):
            return Err(gateway_failed(diff.error, message=f"failed to diff {trunk}...{release}"))

        refused = self._check_diff(diff.value)
        if refused is not None:
            return Ok(replace(refused, pr_id=pr.id))

        completed = self._repo.complete_pull_request(
            pr.id,
            diff.value.target_commit,
            MERGE_MESSAGE,
            squash=True,
            bypass_policy=True,
            delete_source_branch=False,
        )
        if isinstance(completed, Err):
            return Err(gateway_failed(completed.error, message=f"failed to complete PR {pr.id}"))

        self._console.success(f"merged PR {pr.id} into {trunk}")
        return Ok(MergeOutcome(kind="merged", pr_id=pr.id))

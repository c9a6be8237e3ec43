"""Azure DevOps REST bindings of the repository and build gateways.

Branch names cross this boundary in short form; ``refs/heads/`` is added on
write and stripped on read.
"""

from __future__ import annotations

import json
from datetime import datetime
from urllib.parse import quote, urlencode

from reltrain.core.config import RemoteConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.core.structured import (
    StrDict,
    get_bool,
    get_int,
    get_list,
    get_str,
    get_table,
    iter_tables,
)
from reltrain.remote.gateways import (
    BranchRef,
    BuildDefinition,
    BuildRun,
    CommitRecord,
    DiffSummary,
    GatewayError,
    PullRequestRecord,
    RemoteClients,
    RevisionType,
)
from reltrain.remote.http import HttpClient, HttpError, RealHttpClient

__all__ = [
    "AzureBuildGateway",
    "AzureRepositoryGateway",
    "branch_ref",
    "connect_azure",
    "short_branch",
]

_HEADS = "refs/heads/"

_REFS_API = "1.0"
_ITEMS_API = "1.0"
_COMMITS_API = "1.0"
_PUSHES_API = "2.0-preview"
_PULL_REQUESTS_API = "3.0"
_DIFFS_API = "1.0"
_DEFINITIONS_API = "3.0-preview.2"
_BUILDS_API = "2.0"


def branch_ref(name: str) -> str:
    if name.startswith(_HEADS):
        return name
    return f"{_HEADS}{name}"


def short_branch(ref: str) -> str:
    if ref.startswith(_HEADS):
        return ref[len(_HEADS) :]
    return ref


def _fail(operation: str, error: HttpError) -> Err[GatewayError]:
    return Err(GatewayError(operation=operation, message=error.message, status=error.status))


def _values(operation: str, payload: StrDict) -> Result[list[StrDict], GatewayError]:
    raw = get_list(payload, "value")
    if raw is None:
        return Err(GatewayError(operation=operation, message="missing 'value' in payload"))
    return Ok(iter_tables(raw))


def _parse_time(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


class AzureRepositoryGateway:
    """RepositoryGateway over the Git REST API of one repository."""

    def __init__(self, *, http: HttpClient, remote: RemoteConfig) -> None:
        self._http = http
        self._base = f"{remote.project_url}/_apis/git/repositories/{quote(remote.repository)}"

    def _url(self, path: str, params: dict[str, str]) -> str:
        return f"{self._base}/{path}?{urlencode(params)}"

    def list_branches(self, name: str) -> Result[list[BranchRef], GatewayError]:
        url = f"{self._base}/refs/heads/{quote(name)}?api-version={_REFS_API}"
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return _fail("list_branches", result.error)

        values = _values("list_branches", result.value)
        if isinstance(values, Err):
            return values

        out: list[BranchRef] = []
        for item in values.value:
            ref_name = get_str(item, "name")
            object_id = get_str(item, "objectId")
            if ref_name is None or object_id is None:
                continue
            out.append(BranchRef(name=short_branch(ref_name), object_id=object_id))
        return Ok(out)

    def create_branch(
        self, name: str, old_object_id: str, new_object_id: str
    ) -> Result[None, GatewayError]:
        url = self._url("refs", {"api-version": _REFS_API})
        payload = [
            {
                "name": branch_ref(name),
                "oldObjectId": old_object_id,
                "newObjectId": new_object_id,
            }
        ]
        result = self._http.send_json("POST", url, payload)
        if isinstance(result, Err):
            return _fail("create_branch", result.error)

        values = _values("create_branch", result.value)
        if isinstance(values, Err):
            return values
        for update in values.value:
            if get_bool(update, "success") is False:
                status = get_str(update, "updateStatus") or "rejected"
                return Err(GatewayError(operation="create_branch", message=status))
        return Ok(None)

    def get_file(
        self, revision_type: RevisionType, revision: str, path: str
    ) -> Result[str, GatewayError]:
        url = self._url(
            "items",
            {
                "api-version": _ITEMS_API,
                "versionType": revision_type,
                "version": revision,
                "scopePath": path,
                "lastProcessedChange": "true",
            },
        )
        result = self._http.get_text(url)
        if isinstance(result, Err):
            return _fail("get_file", result.error)
        return Ok(result.value)

    def list_commits(
        self, branch: str, path: str, from_time: datetime, to_time: datetime
    ) -> Result[list[CommitRecord], GatewayError]:
        url = self._url(
            "commits",
            {
                "api-version": _COMMITS_API,
                "branch": branch,
                "itemPath": path,
                "fromDate": from_time.isoformat(),
                "toDate": to_time.isoformat(),
            },
        )
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return _fail("list_commits", result.error)

        values = _values("list_commits", result.value)
        if isinstance(values, Err):
            return values

        out: list[CommitRecord] = []
        for item in values.value:
            commit_id = get_str(item, "commitId")
            if commit_id is None:
                continue
            committer = get_table(item, "committer") or {}
            counts = get_table(item, "changeCounts") or {}
            change_count = sum(v for v in counts.values() if isinstance(v, int))
            out.append(
                CommitRecord(
                    commit_id=commit_id,
                    timestamp=_parse_time(get_str(committer, "date")),
                    comment=get_str(item, "comment") or "",
                    change_count=change_count,
                )
            )
        return Ok(out)

    def push(
        self, branch: str, old_object_id: str, comment: str, path: str, content: str
    ) -> Result[None, GatewayError]:
        url = self._url("pushes", {"api-version": _PUSHES_API})
        payload = {
            "refUpdates": [{"name": branch_ref(branch), "oldObjectId": old_object_id}],
            "commits": [
                {
                    "comment": comment,
                    "changes": [
                        {
                            "changeType": "edit",
                            "item": {"path": path},
                            "newContent": {"content": content, "contentType": "rawtext"},
                        }
                    ],
                }
            ],
        }
        result = self._http.send_json("POST", url, payload)
        if isinstance(result, Err):
            return _fail("push", result.error)
        return Ok(None)

    def list_pull_requests(
        self, target: str, source: str, status: str = "active"
    ) -> Result[list[PullRequestRecord], GatewayError]:
        url = self._url(
            "pullrequests",
            {
                "api-version": _PULL_REQUESTS_API,
                "searchCriteria.status": status,
                "searchCriteria.sourceRefName": branch_ref(source),
                "searchCriteria.targetRefName": branch_ref(target),
            },
        )
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return _fail("list_pull_requests", result.error)

        values = _values("list_pull_requests", result.value)
        if isinstance(values, Err):
            return values

        out: list[PullRequestRecord] = []
        for item in values.value:
            pr_id = get_int(item, "pullRequestId")
            if pr_id is None:
                continue
            out.append(
                PullRequestRecord(
                    id=pr_id,
                    status=get_str(item, "status") or status,
                    source_branch=short_branch(get_str(item, "sourceRefName") or source),
                    target_branch=short_branch(get_str(item, "targetRefName") or target),
                    merge_status=get_str(item, "mergeStatus"),
                )
            )
        return Ok(out)

    def submit_pull_request(
        self, source: str, target: str, title: str, description: str
    ) -> Result[None, GatewayError]:
        url = self._url("pullrequests", {"api-version": _PULL_REQUESTS_API})
        payload = {
            "sourceRefName": branch_ref(source),
            "targetRefName": branch_ref(target),
            "title": title,
            "description": description,
        }
        result = self._http.send_json("POST", url, payload)
        if isinstance(result, Err):
            return _fail("submit_pull_request", result.error)
        return Ok(None)

    def diff(self, base: str, target: str) -> Result[DiffSummary, GatewayError]:
        url = self._url(
            "diffs/commits",
            {
                "api-version": _DIFFS_API,
                "baseVersionType": "branch",
                "baseVersion": base,
                "targetVersionType": "branch",
                "targetVersion": target,
            },
        )
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return _fail("diff", result.error)

        data = result.value
        ahead = get_int(data, "aheadCount")
        behind = get_int(data, "behindCount")
        target_commit = get_str(data, "targetCommit")
        if ahead is None or behind is None or target_commit is None:
            return Err(GatewayError(operation="diff", message="incomplete diff payload"))

        paths: list[str] = []
        for change in iter_tables(get_list(data, "changes") or []):
            item = get_table(change, "item") or {}
            if get_bool(item, "isFolder"):
                continue
            path = get_str(item, "path")
            if path is not None:
                paths.append(path)

        return Ok(
            DiffSummary(
                ahead_count=ahead,
                behind_count=behind,
                changed_paths=tuple(paths),
                target_commit=target_commit,
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
        url = self._url(f"pullrequests/{pr_id}", {"api-version": _PULL_REQUESTS_API})
        payload = {
            "status": "completed",
            "lastMergeSourceCommit": {"commitId": last_merge_source_commit},
            "completionOptions": {
                "mergeCommitMessage": message,
                "squashMerge": squash,
                "bypassPolicy": bypass_policy,
                "deleteSourceBranch": delete_source_branch,
            },
        }
        result = self._http.send_json("PATCH", url, payload)
        if isinstance(result, Err):
            return _fail("complete_pull_request", result.error)
        return Ok(None)


class AzureBuildGateway:
    """BuildGateway over the Build REST API of one project."""

    def __init__(self, *, http: HttpClient, remote: RemoteConfig) -> None:
        self._http = http
        self._base = f"{remote.project_url}/_apis/build"

    def _url(self, path: str, params: dict[str, str]) -> str:
        return f"{self._base}/{path}?{urlencode(params)}"

    def list_definitions(self, path: str, name: str) -> Result[list[BuildDefinition], GatewayError]:
        url = self._url(
            "definitions",
            {"api-version": _DEFINITIONS_API, "path": path, "name": name},
        )
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return _fail("list_definitions", result.error)

        values = _values("list_definitions", result.value)
        if isinstance(values, Err):
            return values

        out: list[BuildDefinition] = []
        for item in values.value:
            def_id = get_int(item, "id")
            if def_id is None:
                continue
            out.append(
                BuildDefinition(
                    id=def_id,
                    name=get_str(item, "name") or "",
                    path=get_str(item, "path") or "",
                )
            )
        return Ok(out)

    def _queue(self, operation: str, payload: StrDict) -> Result[None, GatewayError]:
        url = self._url("builds", {"api-version": _BUILDS_API})
        result = self._http.send_json("POST", url, payload)
        if isinstance(result, Err):
            return _fail(operation, result.error)
        return Ok(None)

    def queue_onboarding_build(
        self, definition_id: int, source_branch: str, parameters: dict[str, str]
    ) -> Result[None, GatewayError]:
        return self._queue(
            "queue_onboarding_build",
            {
                "definition": {"id": definition_id},
                "sourceBranch": branch_ref(source_branch),
                # The service expects parameters as a JSON-encoded string.
                "parameters": json.dumps(parameters),
            },
        )

    def list_builds(self, definition_id: int) -> Result[list[BuildRun], GatewayError]:
        url = self._url(
            "builds",
            {"api-version": _BUILDS_API, "definitions": str(definition_id)},
        )
        result = self._http.get_json(url)
        if isinstance(result, Err):
            return _fail("list_builds", result.error)

        values = _values("list_builds", result.value)
        if isinstance(values, Err):
            return values

        out: list[BuildRun] = []
        for item in values.value:
            build_id = get_int(item, "id")
            if build_id is None:
                continue
            out.append(BuildRun(id=build_id, status=get_str(item, "status") or "unknown"))
        return Ok(out)

    def queue_build(self, definition_id: int, source_branch: str) -> Result[None, GatewayError]:
        return self._queue(
            "queue_build",
            {"definition": {"id": definition_id}, "sourceBranch": branch_ref(source_branch)},
        )


def connect_azure(remote: RemoteConfig, *, timeout: float) -> RemoteClients:
    """Open one set of REST gateway handles with their own HTTP client."""
    http = RealHttpClient(username=remote.username, password=remote.password, timeout=timeout)
    return RemoteClients(
        repository=AzureRepositoryGateway(http=http, remote=remote),
        builds=AzureBuildGateway(http=http, remote=remote),
    )

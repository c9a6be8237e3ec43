"""Tests for the in-memory gateways used throughout the release tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from reltrain.core.result import Err, Ok
from reltrain.remote.fake import FakeBuildService, FakeRepository
from reltrain.remote.gateways import ZERO_OBJECT_ID, BuildDefinition, GatewayError


def test_create_branch_fails_when_branch_exists() -> None:
    repo = FakeRepository()
    head = repo.add_branch("master", {"/a": "1"})

    assert repo.create_branch("rel", ZERO_OBJECT_ID, head) == Ok(None)
    result = repo.create_branch("rel", ZERO_OBJECT_ID, head)

    assert isinstance(result, Err)
    assert result.error.message == "staleRef"


def test_push_requires_current_head() -> None:
    repo = FakeRepository()
    head = repo.add_branch("rel", {"/a": "1"})

    assert repo.push("rel", head, "edit", "/a", "2") == Ok(None)
    stale = repo.push("rel", head, "edit", "/a", "3")

    assert isinstance(stale, Err)
    assert stale.error.status == 409
    assert repo.get_file("branch", "rel", "/a") == Ok("2")
    assert len(repo.pushes) == 2


def test_get_file_by_commit_sees_old_content() -> None:
    repo = FakeRepository()
    first = repo.add_branch("rel", {"/a": "1"})
    repo.add_commit("rel", "/a", "2")

    assert repo.get_file("commit", first, "/a") == Ok("1")
    assert repo.get_file("branch", "rel", "/a") == Ok("2")
    assert isinstance(repo.get_file("branch", "rel", "/missing"), Err)


def test_list_commits_filters_window_and_path() -> None:
    repo = FakeRepository()
    now = datetime(2026, 10, 21, 12, 0, tzinfo=UTC)
    repo.add_branch("rel", {"/a": "1", "/b": "1"})
    repo.add_commit("rel", "/a", "old", timestamp=now - timedelta(days=10))
    inside = repo.add_commit("rel", "/a", "new", timestamp=now - timedelta(days=1))
    repo.add_commit("rel", "/b", "other", timestamp=now - timedelta(days=1))

    result = repo.list_commits("rel", "/a", now - timedelta(days=3), now)

    assert isinstance(result, Ok)
    assert [c.commit_id for c in result.value] == [inside]


def test_complete_squashes_source_into_target() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {"/v": "1"})
    repo.add_branch("rel", {"/v": "1"})
    head = repo.add_commit("rel", "/v", "2")
    pr_id = repo.add_pull_request("rel", "master")

    result = repo.complete_pull_request(
        pr_id, head, "msg", squash=True, bypass_policy=True, delete_source_branch=False
    )

    assert result == Ok(None)
    assert repo.get_file("branch", "master", "/v") == Ok("2")
    assert repo.pull_requests[0].status == "completed"
    assert "rel" in repo.branches


def test_complete_rejects_moved_source() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {"/v": "1"})
    repo.add_branch("rel", {"/v": "1"})
    head = repo.add_commit("rel", "/v", "2")
    repo.add_commit("rel", "/v", "3")
    pr_id = repo.add_pull_request("rel", "master")

    result = repo.complete_pull_request(
        pr_id, head, "msg", squash=True, bypass_policy=True, delete_source_branch=False
    )

    assert isinstance(result, Err)
    assert result.error.status == 409
    assert repo.completions == []


def test_injected_failure_is_recorded() -> None:
    repo = FakeRepository()
    repo.failures["diff"] = GatewayError(operation="diff", message="boom", status=500)

    result = repo.diff("master", "rel")

    assert isinstance(result, Err)
    assert repo.count("diff") == 1


def test_build_service_provisions_after_polls() -> None:
    provisioned = BuildDefinition(id=9, name="Shell-Release", path="\\Release\\rel")
    builds = FakeBuildService(onboarding_polls=2, provisioned=provisioned)

    builds.queue_onboarding_build(1234, "master", {"GitBranchName": "rel"})

    assert builds.list_definitions("\\Release\\rel", "Shell-Release") == Ok([])
    assert builds.list_definitions("\\Release\\rel", "Shell-Release") == Ok([provisioned])


def test_build_service_queue_build_adds_run() -> None:
    builds = FakeBuildService()
    builds.queue_build(9, "rel")
    result = builds.list_builds(9)
    assert isinstance(result, Ok)
    assert [r.status for r in result.value] == ["notStarted"]

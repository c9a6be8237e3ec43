"""Tests for the read-only release status probe."""

from __future__ import annotations

from datetime import UTC, datetime

from reltrain.core.config import BuildConfig, ReleaseConfig, RemoteConfig, TrainConfig
from reltrain.core.result import Err, Ok, Result
from reltrain.output.console import MockConsole
from reltrain.release.errors import TrainError
from reltrain.release.status import ReleaseStatus, probe_release_status
from reltrain.release.version import VersionDescriptor
from reltrain.remote.fake import FakeBuildService, FakeRepository
from reltrain.remote.gateways import RemoteClients

VERSION_PATH = "/src/version.xml"
NOW = datetime(2026, 10, 22, 9, 0, tzinfo=UTC)

CONFIG = TrainConfig(
    remote=RemoteConfig(
        instance="dev.example.com",
        project="Shell",
        repository="Shell-Service",
        username="bot",
        password="secret",
    ),
    release=ReleaseConfig(trunk_branch="master", branch_prefix="rel", version_path=VERSION_PATH),
    build=BuildConfig(
        definition_path_prefix="\\Release",
        definition_name="Shell-Release",
        onboarding_definition_id=1234,
        onboarding_repository="Shell-Service",
    ),
)


def version_xml(value: str) -> str:
    return f'<root><versions><version name="Shell" value="{value}" /></versions></root>'


def _probe(repo: FakeRepository) -> Result[ReleaseStatus, TrainError]:
    return probe_release_status(
        config=CONFIG,
        clients=RemoteClients(repository=repo, builds=FakeBuildService()),
        console=MockConsole(),
        now=NOW,
    )


def test_branch_not_created_yet() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {VERSION_PATH: version_xml("1.4.7.3")})

    result = _probe(repo)

    assert isinstance(result, Ok)
    status = result.value
    assert status.branch == "rel20261019"
    assert not status.exists
    assert not status.reset_pending
    assert not status.merge_pending
    assert status.trunk_version == VersionDescriptor((1, 4, 7, 3))


def test_reset_and_merge_pending() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {VERSION_PATH: version_xml("1.4.7.3")})
    repo.add_branch("rel20261019", {VERSION_PATH: version_xml("1.4.8.2")})

    result = _probe(repo)

    assert isinstance(result, Ok)
    assert result.value.exists
    assert result.value.reset_pending
    assert result.value.merge_pending


def test_settled_cycle() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {VERSION_PATH: version_xml("1.4.8.0")})
    repo.add_branch("rel20261019", {VERSION_PATH: version_xml("1.4.8.0")})

    result = _probe(repo)

    assert isinstance(result, Ok)
    assert not result.value.reset_pending
    assert not result.value.merge_pending


def test_probe_never_writes() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {VERSION_PATH: version_xml("1.4.7.3")})

    _probe(repo)

    assert repo.count("create_branch") == 0
    assert repo.count("push") == 0


def test_unreadable_trunk_version() -> None:
    repo = FakeRepository()
    repo.add_branch("master", {"/other": "x"})

    result = _probe(repo)

    assert isinstance(result, Err)
    assert result.error.kind == "gateway_failed"

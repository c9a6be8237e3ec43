"""Typed configuration loading and access.

The release train reads one TOML file into a frozen TrainConfig that is
passed into every component. Nothing reads configuration from module state.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_int, get_str, get_table

__all__ = [
    "BuildConfig",
    "ConfigError",
    "PASSWORD_ENV_VAR",
    "ReleaseConfig",
    "RemoteConfig",
    "TrainConfig",
    "load_config",
]

PASSWORD_ENV_VAR = "RELTRAIN_PASSWORD"
DEFAULT_COLLECTION = "DefaultCollection"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RemoteConfig:
    """Where the repository and build service live, and how to sign in."""

    instance: str
    project: str
    repository: str
    username: str
    password: str
    collection: str = DEFAULT_COLLECTION

    @property
    def project_url(self) -> str:
        return f"https://{self.instance}/{self.collection}/{self.project}"


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    trunk_branch: str
    branch_prefix: str
    version_path: str


@dataclass(frozen=True, slots=True)
class BuildConfig:
    definition_path_prefix: str
    definition_name: str
    onboarding_definition_id: int
    # Repository name handed to the onboarding build; usually the repository itself.
    onboarding_repository: str

    def definition_path(self, branch: str) -> str:
        return f"{self.definition_path_prefix}\\{branch}"


@dataclass(frozen=True, slots=True)
class TrainConfig:
    """Main configuration container."""

    remote: RemoteConfig
    release: ReleaseConfig
    build: BuildConfig

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, object],
        *,
        env: Mapping[str, str] | None = None,
    ) -> Result[TrainConfig, str]:
        """Create TrainConfig from a mapping (parsed TOML).

        Returns Err naming every missing or invalid key by its dotted name.
        """
        environ = os.environ if env is None else env
        remote: StrDict = get_table(data, "remote") or {}
        release: StrDict = get_table(data, "release") or {}
        build: StrDict = get_table(data, "build") or {}

        missing: list[str] = []

        def req(table: StrDict, section: str, key: str) -> str:
            value = get_str(table, key)
            if value is None:
                missing.append(f"{section}.{key}")
                return ""
            return value

        instance = req(remote, "remote", "instance")
        project = req(remote, "remote", "project")
        repository = req(remote, "remote", "repository")
        username = req(remote, "remote", "username")

        password = environ.get(PASSWORD_ENV_VAR) or get_str(remote, "password")
        if not password:
            missing.append(f"remote.password (or ${PASSWORD_ENV_VAR})")
            password = ""

        trunk_branch = req(release, "release", "trunk_branch")
        branch_prefix = req(release, "release", "branch_prefix")
        version_path = req(release, "release", "version_path")

        definition_path_prefix = req(build, "build", "definition_path_prefix")
        definition_name = req(build, "build", "definition_name")
        onboarding_id = get_int(build, "onboarding_definition_id")
        if onboarding_id is None or onboarding_id <= 0:
            missing.append("build.onboarding_definition_id")
            onboarding_id = 0

        if missing:
            return Err(f"missing or invalid: {', '.join(missing)}")

        return Ok(
            cls(
                remote=RemoteConfig(
                    instance=instance,
                    project=project,
                    repository=repository,
                    username=username,
                    password=password,
                    collection=get_str(remote, "collection") or DEFAULT_COLLECTION,
                ),
                release=ReleaseConfig(
                    trunk_branch=trunk_branch,
                    branch_prefix=branch_prefix,
                    version_path=version_path,
                ),
                build=BuildConfig(
                    definition_path_prefix=definition_path_prefix,
                    definition_name=definition_name,
                    onboarding_definition_id=onboarding_id,
                    onboarding_repository=get_str(build, "onboarding_repository") or repository,
                ),
            )
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(
    path: Path,
    *,
    env: Mapping[str, str] | None = None,
) -> Result[TrainConfig, ConfigError]:
    """Load and validate the release-train configuration.

    Args:
        path: Path to the TOML file
        env: Environment used for the password override (defaults to os.environ)

    Returns:
        Ok(TrainConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    config = TrainConfig.from_dict(result.value, env=env)
    if isinstance(config, Err):
        return Err(ConfigError(f"Invalid config: {config.error}", path=path))
    return Ok(config.value)

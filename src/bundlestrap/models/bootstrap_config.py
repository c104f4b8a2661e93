"""Configuration model for bundlestrap."""

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bundlestrap.constants import (
    DEFAULT_ARCHIVE_NAME,
    DEFAULT_BUNDLE_DIR_NAME,
    DEFAULT_ENTRY_POINT,
    DEFAULT_ENV_OVERRIDES,
    DEFAULT_RUNNER,
    DEFAULT_SETTINGS_NAME,
    DOWNLOAD_CHUNK_SIZE,
    NETWORK_TIMEOUT_SECONDS,
)

# GitHub source archives unpack to "<repo>-<ref>/".
_GITHUB_ARCHIVE_RE = re.compile(r"/(?P<repo>[^/]+)/archive/(?:refs/heads/)?(?P<ref>[^/]+)\.zip$")


def default_staging_root() -> Path:
    return Path.cwd() / ".cache" / "bundlestrap" / "staging"


def default_local_settings() -> Path:
    return Path.cwd() / DEFAULT_SETTINGS_NAME


def derive_bundle_dir_name(url: str) -> str:
    """Guess the top-level directory an archive at ``url`` unpacks to."""
    match = _GITHUB_ARCHIVE_RE.search(urlsplit(url).path)
    if match is None:
        return DEFAULT_BUNDLE_DIR_NAME
    return f"{match.group('repo')}-{match.group('ref')}"


class BootstrapConfig(BaseModel):
    """Runtime configuration for one bootstrap run.

    Built once at startup and handed to every stage; instances are frozen.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    download_url: str
    staging_root: Path = Field(default_factory=default_staging_root)
    bundle_dir_name: str | None = None
    nesting_depth: int = Field(default=0, ge=0, le=64)
    archive_name: str = DEFAULT_ARCHIVE_NAME
    local_settings: Path = Field(default_factory=default_local_settings)
    settings_relpath: str = DEFAULT_SETTINGS_NAME
    entry_point: str = DEFAULT_ENTRY_POINT
    runner: tuple[str, ...] = DEFAULT_RUNNER
    # Stored as pairs so the frozen model cannot be mutated through it.
    env_overrides: tuple[tuple[str, str], ...] = DEFAULT_ENV_OVERRIDES
    fetch_timeout: float = Field(default=NETWORK_TIMEOUT_SECONDS, gt=0)
    fetch_retries: int = Field(default=0, ge=0, le=10)
    chunk_size: int = Field(default=DOWNLOAD_CHUNK_SIZE, gt=0)

    @field_validator("env_overrides", mode="before")
    @classmethod
    def _pairs_from_mapping(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return tuple((str(k), str(v)) for k, v in value.items())
        return value

    @field_validator("download_url")
    @classmethod
    def _check_url_scheme(cls, value: str) -> str:
        scheme = urlsplit(value).scheme.lower()
        if scheme not in {"http", "https"}:
            raise ValueError(f"download_url must be an http(s) URL, got {value!r}")
        return value

    @field_validator("bundle_dir_name", "archive_name", "entry_point")
    @classmethod
    def _check_plain_name(cls, value: str | None) -> str | None:
        if value is None:
            return value
        if not value or value in {".", ".."} or "/" in value or "\\" in value:
            raise ValueError(f"expected a plain file name, got {value!r}")
        return value

    @field_validator("settings_relpath")
    @classmethod
    def _check_relative(cls, value: str) -> str:
        # The overlay target must stay inside the extracted bundle.
        rel = Path(value)
        if not value or rel.is_absolute() or ".." in rel.parts:
            raise ValueError(f"settings_relpath must be relative to the bundle, got {value!r}")
        return value

    @field_validator("runner")
    @classmethod
    def _check_runner(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("runner must name at least one executable")
        return value

    @property
    def bundle_name(self) -> str:
        if self.bundle_dir_name:
            return self.bundle_dir_name
        return derive_bundle_dir_name(self.download_url)

    @property
    def staging_dir(self) -> Path:
        """Staging root plus ``nesting_depth`` hidden segments."""
        segments = [f".x{i}" for i in range(1, self.nesting_depth + 1)]
        return self.staging_root.joinpath(*segments)

    @property
    def extract_dir(self) -> Path:
        return self.staging_dir / self.bundle_name

    @property
    def archive_path(self) -> Path:
        return self.staging_dir / self.archive_name

    @property
    def extracted_settings(self) -> Path:
        return self.extract_dir / self.settings_relpath

    @property
    def env_override_map(self) -> dict[str, str]:
        return dict(self.env_overrides)

"""Manifest providers turn a location string into a local manifest directory."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

import platformdirs

logger = logging.getLogger(__name__)


class ManifestProviderError(Exception):
    """The provider could not resolve the location to a directory."""

    def __init__(self, message: str = "no resolution") -> None:
        super().__init__(message)


class ManifestProvider(ABC):
    """Resolves a location string to the directory holding manifests."""

    @abstractmethod
    def looks_familiar(self, url: str) -> bool:
        """Whether this provider might be able to resolve the location."""

    @abstractmethod
    def resolve(self, url: str) -> Path:
        """Return the manifest directory, or raise ManifestProviderError."""


class LocalManifestProvider(ManifestProvider):
    """Resolves any existing local path; the last resort."""

    def looks_familiar(self, url: str) -> bool:
        return True

    def resolve(self, url: str) -> Path:
        if not url:
            raise ManifestProviderError(f"cannot resolve empty path")
        try:
            return Path(url).resolve(strict=True)
        except (OSError, RuntimeError) as error:
            raise ManifestProviderError(f"cannot resolve {url}") from error


@dataclass(frozen=True)
class GitConfig:
    """A repository location with an optional branch and sub-path."""

    repository: str
    branch: str | None = None
    path: str | None = None


_GIT_URL = re.compile(r"^(https|git|ssh)://")


class GitManifestProvider(ManifestProvider):
    """Clones a repository into the user cache and resolves to that clone."""

    def looks_familiar(self, url: str) -> bool:
        return _GIT_URL.match(url) is not None

    def resolve(self, url: str) -> Path:
        config = self.parse_config_url(url)
        clean_url = self.clean_git_url(config.repository)
        cache_path = (
            Path(platformdirs.user_cache_dir())
            / "provisio"
            / "manifests"
            / "git"
            / clean_url
        )
        if not cache_path.exists():
            self._fetch_and_clone(cache_path, config)
        return cache_path

    def _fetch_and_clone(self, cache_path: Path, config: GitConfig) -> None:
        logger.info("Preparing to fetch and clone manifests.")
        try:
            cache_path.mkdir(parents=True, exist_ok=True)
        except OSError as error:
            raise ManifestProviderError(f"cannot create {cache_path}") from error

        git = shutil.which("git")
        if git is None:
            raise ManifestProviderError("git is not available")

        try:
            result = subprocess.run(
                [git, "clone", "--quiet", config.repository, str(cache_path)],
                capture_output=True,
                check=False,
            )
        except OSError as error:
            raise ManifestProviderError(f"cannot clone {config.repository}") from error
        if result.returncode != 0:
            raise ManifestProviderError(f"cannot clone {config.repository}")

        logger.info("Finished fetch and clone operation.")

    def parse_config_url(self, uri: str) -> GitConfig:
        """Split 'repository#branch:path' into its parts."""
        repository, sep, parts = uri.partition("#")
        if not sep:
            return GitConfig(repository=uri)

        reference, sep, path = parts.partition(":")
        if not sep:
            return GitConfig(repository=repository, branch=parts)
        if reference == "":
            return GitConfig(repository=repository, branch=None, path=path)
        if path == "":
            return GitConfig(repository=repository, branch=reference, path=None)
        return GitConfig(repository=repository, branch=reference, path=path)

    def clean_git_url(self, uri: str) -> str:
        """Reduce a repository URL to a name usable as a directory."""
        cleaned = uri.replace("https", "").replace("http", "")
        for ch in ":./":
            cleaned = cleaned.replace(ch, "")
        return cleaned


def register_providers() -> list[ManifestProvider]:
    """All manifest providers, in the order they are tried."""
    return [LocalManifestProvider(), GitManifestProvider()]
from pathlib import Path

import platformdirs
import pytest

from provisio.manifests.providers import (
    GitConfig,
    GitManifestProvider,
    LocalManifestProvider,
    ManifestProviderError,
    register_providers,
)


def test_resolve_absolute_url():
    provider = LocalManifestProvider()
    cwd = Path.cwd().resolve()
    assert provider.resolve(str(cwd)) == cwd
    with pytest.raises(ManifestProviderError):
        provider.resolve("/never-resolve")


def test_resolve_relative_url(tmp_path, monkeypatch):
    (tmp_path / "examples").mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    provider = LocalManifestProvider()

    assert provider.resolve("../examples") == (tmp_path / "examples").resolve()
    with pytest.raises(ManifestProviderError):
        provider.resolve("never-resolve")


def test_local_looks_familiar_with_anything():
    assert LocalManifestProvider().looks_familiar("anything at all") is True


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://example.com/repo.git", True),
        ("git://example.com/repo.git", True),
        ("ssh://example.com/repo.git", True),
        ("http://example.com/repo.git", False),
        ("./manifests", False),
    ],
)
def test_git_looks_familiar(url, expected):
    assert GitManifestProvider().looks_familiar(url) is expected


@pytest.mark.parametrize(
    ("uri", "expected"),
    [
        ("https://example.com/r.git", GitConfig("https://example.com/r.git")),
        ("https://example.com/r.git#main", GitConfig("https://example.com/r.git", "main")),
        (
            "https://example.com/r.git#main:sub",
            GitConfig("https://example.com/r.git", "main", "sub"),
        ),
        ("https://example.com/r.git#:sub", GitConfig("https://example.com/r.git", None, "sub")),
        ("https://example.com/r.git#main:", GitConfig("https://example.com/r.git", "main", None)),
    ],
)
def test_parse_config_url(uri, expected):
    assert GitManifestProvider().parse_config_url(uri) == expected


def test_clean_git_url():
    assert GitManifestProvider().clean_git_url("https://example.com/x/y.git") == "examplecomxygit"


def test_git_resolve_uses_existing_cache(tmp_path, monkeypatch):
    monkeypatch.setattr(platformdirs, "user_cache_dir", lambda: str(tmp_path))
    cached = tmp_path / "provisio" / "manifests" / "git" / "examplecomrgit"
    cached.mkdir(parents=True)
    assert GitManifestProvider().resolve("https://example.com/r.git#main") == cached


def test_register_providers_order():
    kinds = [type(provider) for provider in register_providers()]
    assert kinds == [LocalManifestProvider, GitManifestProvider]
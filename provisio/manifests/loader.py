"""Finding, rendering and parsing manifest files."""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jinja2
import yaml

from provisio.contexts import Contexts, to_template_context
from provisio.manifests.providers import ManifestProviderError, register_providers
from provisio.templating import create_environment

logger = logging.getLogger(__name__)

_MAX_DEPTH = 9
_MANIFEST_SUFFIXES = (".yaml", ".yml", ".toml")


def _optional_str(name: str, value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    raise TypeError(f"'{name}' must be a string")


def _str_list(name: str, value: Any) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"'{name}' must be a list of strings")
    return list(value)


@dataclass
class Manifest:
    """A named collection of actions, with the labels and dependencies that order it."""

    where: str | None = None
    name: str | None = None
    labels: list[str] = field(default_factory=list)
    depends: list[str] = field(default_factory=list)
    actions: list[Any] = field(default_factory=list)
    root_dir: Path | None = None
    dag_index: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Manifest:
        """Build a manifest from parsed data; missing keys take their defaults."""
        if not isinstance(data, Mapping):
            raise TypeError("invalid type: expected a manifest mapping")
        actions = data.get("actions", [])
        if actions is None:
            actions = []
        if not isinstance(actions, list):
            raise TypeError("'actions' must be a list")
        return cls(
            where=_optional_str("where", data.get("where")),
            name=_optional_str("name", data.get("name")),
            labels=_str_list("labels", data.get("labels", [])),
            depends=_str_list("depends", data.get("depends", [])),
            actions=list(actions),
        )


def resolve(uri: str) -> Path:
    """Find the manifest directory for a location using the first provider that can."""
    for provider in register_providers():
        if not provider.looks_familiar(uri):
            continue
        try:
            directory = provider.resolve(uri)
        except ManifestProviderError:
            continue
        return directory.resolve(strict=True)

    logger.error("Failed to find manifests at %s", uri)
    raise ManifestProviderError(f"Failed to find manifests at {uri}")


def _trim_end_matches(text: str, suffix: str) -> str:
    while text.endswith(suffix):
        text = text[: -len(suffix)]
    return text


def get_manifest_name(manifest_directory: str | os.PathLike, location: str | os.PathLike) -> str:
    """Derive a dotted manifest name from a file's place below the manifest directory."""
    relative = Path(location).relative_to(Path(manifest_directory))
    name = ".".join(relative.parts)
    name = _trim_end_matches(name, ".yaml")
    name = _trim_end_matches(name, ".yml")
    return _trim_end_matches(name, ".main")


def _walk(root: Path) -> Iterator[Path]:
    """Yield candidate files below root, skipping hidden entries and 'files' directories."""
    try:
        root_stat = root.stat()
    except OSError as error:
        logger.error("Cannot read manifest path %s: %s", root, error)
        return
    if not root.is_dir():
        yield root
        return
    device = root_stat.st_dev

    def descend(directory: Path, depth: int) -> Iterator[Path]:
        try:
            entries = sorted(os.scandir(directory), key=lambda entry: entry.name)
        except OSError as error:
            logger.error("Cannot read directory %s: %s", directory, error)
            return
        for entry in entries:
            if entry.name.startswith("."):
                continue
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
            except OSError:
                continue
            if is_dir:
                if entry.name == "files" or depth + 1 >= _MAX_DEPTH:
                    continue
                try:
                    if entry.stat(follow_symlinks=False).st_dev != device:
                        continue
                except OSError:
                    continue
                yield from descend(Path(entry.path), depth + 1)
            else:
                yield Path(entry.path)

    yield from descend(root, 0)


def _parse(path: Path, text: str) -> Any:
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text)
        if data is None:
            raise ValueError("invalid type: empty document, expected a manifest")
        return data
    return tomllib.loads(text)


def load(manifest_path: str | os.PathLike, contexts: Contexts) -> dict[str, Manifest]:
    """Render and parse every manifest below a directory, keyed by manifest name."""
    manifest_path = Path(manifest_path)
    manifests: dict[str, Manifest] = {}
    environment = create_environment()
    template_context = to_template_context(contexts)

    for candidate in _walk(manifest_path):
        if not candidate.name.endswith(_MANIFEST_SUFFIXES):
            continue

        entry = candidate.resolve()
        try:
            contents = entry.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            contents = ""

        try:
            rendered = environment.from_string(contents).render(template_context)
        except (jinja2.TemplateError, OSError, TypeError, ValueError) as error:
            logger.error("%s", error)
            continue

        if entry.suffix not in _MANIFEST_SUFFIXES:
            logger.error("Unrecognized file extension for manifest")
            continue

        try:
            manifest = Manifest.from_dict(_parse(entry, rendered))
        except (yaml.YAMLError, tomllib.TOMLDecodeError, TypeError, ValueError) as error:
            try:
                manifest_name = get_manifest_name(manifest_path, entry)
            except ValueError:
                manifest_name = ""
            logger.error(
                "Manifest '%s' in file with path '%s' cannot be parsed. Reason: %s",
                manifest_name,
                entry,
                error,
            )
            continue

        name = get_manifest_name(manifest_path, entry)
        manifest.root_dir = entry.parent
        manifest.name = name
        manifests[name] = manifest

    return manifests
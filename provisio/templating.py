"""Template rendering for manifests, with the helper functions they may call."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import jinja2


def read_file_contents(path: str) -> str:
    """Return the contents of a file with surrounding whitespace removed."""
    if not isinstance(path, str):
        raise TypeError(
            f"Path: '{path}'. Error: Cannot convert argument 'path' to str"
        )
    return Path(path).read_text(encoding="utf-8").strip()


def create_environment() -> jinja2.Environment:
    """A template environment with the manifest helper functions registered."""
    environment = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    environment.globals["read_file_contents"] = read_file_contents
    return environment


def render_string(template: str, context: Mapping[str, Any]) -> str:
    """Render a template string with the given variables."""
    return create_environment().from_string(template).render(dict(context))
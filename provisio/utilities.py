"""Small helpers shared by atoms."""

from __future__ import annotations

import shutil

from provisio.contexts import Contexts


def get_binary_path(binary: str) -> str:
    """Return the path of an executable, looked up on PATH."""
    path = shutil.which(binary)
    if path is None:
        raise FileNotFoundError(f"cannot find binary path for {binary!r}")
    return path


def get_privilege_provider(contexts: Contexts) -> str | None:
    """Return the configured privilege tool, if the contexts carry one."""
    values = contexts.get("privilege")
    if not values:
        return None
    return str(values[min(values)])
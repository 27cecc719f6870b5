"""Initializers decide whether an atom runs, and may prepare its environment."""

from __future__ import annotations

import os
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


class Initializer(ABC):
    """Runs before an atom and answers a yes/no question."""

    @abstractmethod
    def initialize(self) -> bool:
        """Return the initializer's answer."""


@dataclass
class CommandFound(Initializer):
    """True when the command can be found on PATH."""

    command: str

    def initialize(self) -> bool:
        return shutil.which(self.command) is not None


@dataclass
class SetEnvVars(Initializer):
    """Set environment variables; always true."""

    variables: dict[str, str] = field(default_factory=dict)

    def initialize(self) -> bool:
        os.environ.update(self.variables)
        return True


@dataclass
class FileExists(Initializer):
    """True when the path exists."""

    path: Path

    def __post_init__(self) -> None:
        self.path = Path(self.path)

    def initialize(self) -> bool:
        return self.path.exists()


@dataclass
class Ensure:
    """Run the atom only when the initializer answers true."""

    initializer: Initializer


@dataclass
class SkipIf:
    """Skip the atom when the initializer answers true."""

    initializer: Initializer


FlowControl = Ensure | SkipIf
"""Run configuration and the privilege escalation tool it selects."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Privilege(Enum):
    """The tool used to run commands with elevated privileges."""

    SUDO = "sudo"
    DOAS = "doas"
    RUN0 = "run0"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> Privilege:
        """Read a privilege from its variant name or its lower-case alias."""
        for member in cls:
            if text in (member.value, member.value.capitalize()):
                return member
        raise ValueError(
            f"unknown variant `{text}`, expected one of `Sudo`, `Doas`, `Run0`"
        )


def _string_list(name: str, value: Any) -> list[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise TypeError(f"'{name}' must be a list of strings")
    if not all(isinstance(item, str) for item in value):
        raise TypeError(f"'{name}' must be a list of strings")
    return list(value)


@dataclass
class Config:
    """Settings for a run: where manifests live and which variables they see."""

    manifest_paths: list[str] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)
    include_variables: list[str] | None = None
    disable_update_check: bool = False
    privilege: Privilege = Privilege.SUDO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build a configuration from parsed data; missing keys take their defaults."""
        config = cls()
        if "manifest_paths" in data:
            config.manifest_paths = _string_list("manifest_paths", data["manifest_paths"])
        if "variables" in data:
            variables = data["variables"]
            if not isinstance(variables, Mapping):
                raise TypeError("'variables' must be a mapping of strings")
            for key, value in variables.items():
                if not isinstance(key, str) or not isinstance(value, str):
                    raise TypeError("'variables' must be a mapping of strings")
            config.variables = dict(sorted(variables.items()))
        if data.get("include_variables") is not None:
            config.include_variables = _string_list(
                "include_variables", data["include_variables"]
            )
        if "disable_update_check" in data:
            flag = data["disable_update_check"]
            if not isinstance(flag, bool):
                raise TypeError("'disable_update_check' must be a boolean")
            config.disable_update_check = flag
        if "privilege" in data:
            privilege = data["privilege"]
            if isinstance(privilege, Privilege):
                config.privilege = privilege
            elif isinstance(privilege, str):
                config.privilege = Privilege.parse(privilege)
            else:
                raise TypeError("'privilege' must be a string")
        return config
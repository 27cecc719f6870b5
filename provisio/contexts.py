"""Context providers that gather the variables manifests are rendered with."""

from __future__ import annotations

import datetime as _dt
import getpass
import logging
import os
import platform
import re
import socket
import sys
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, ClassVar
from urllib.parse import urlsplit

import dns.resolver
import platformdirs
import yaml

from provisio.config import Config
from provisio.values import Value

logger = logging.getLogger(__name__)

Contexts = dict[str, dict[str, Value]]


@dataclass(frozen=True)
class KeyValueContext:
    """A single named value."""

    key: str
    value: Value


@dataclass(frozen=True)
class ListContext:
    """A named list of values."""

    key: str
    values: tuple[Value, ...]


Context = KeyValueContext | ListContext


class ContextProvider(ABC):
    """Supplies the values found under one prefix."""

    prefix: ClassVar[str]

    @abstractmethod
    def get_contexts(self) -> list[Context]:
        """Return the contexts this provider knows about."""


class EnvContextProvider(ContextProvider):
    """The process environment."""

    prefix = "env"

    def get_contexts(self) -> list[Context]:
        return [
            KeyValueContext(key, Value.from_python(value))
            for key, value in os.environ.items()
        ]


def _os_release() -> dict[str, str]:
    try:
        return platform.freedesktop_os_release()
    except OSError:
        return {}


def _os_name() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "macos"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    for name in ("freebsd", "openbsd", "netbsd", "dragonfly"):
        if sys.platform.startswith(name):
            return name
    return sys.platform


def _os_details() -> tuple[str, str, str, str]:
    """Return distribution, codename, version and edition."""
    name = _os_name()
    if name == "linux":
        release = _os_release()
        return (
            release.get("NAME", "Linux"),
            release.get("VERSION_CODENAME") or "unknown",
            release.get("VERSION_ID") or "Unknown",
            release.get("VARIANT") or "unknown",
        )
    if name == "macos":
        return "Mac OS", "unknown", platform.mac_ver()[0] or "Unknown", "unknown"
    if name == "windows":
        edition = "unknown"
        win32_edition = getattr(platform, "win32_edition", None)
        if win32_edition is not None:
            edition = win32_edition() or "unknown"
        return "Windows", "unknown", platform.version() or "Unknown", edition
    if name == "freebsd":
        return "FreeBSD", "unknown", platform.release() or "Unknown", "unknown"
    return "Unknown", "unknown", "Unknown", "unknown"


class OSContextProvider(ContextProvider):
    """Facts about the operating system."""

    prefix = "os"

    def get_contexts(self) -> list[Context]:
        distribution, codename, version, edition = _os_details()
        facts = {
            "hostname": socket.gethostname(),
            "family": "windows" if os.name == "nt" else "unix",
            "name": _os_name(),
            "distribution": distribution,
            "codename": codename,
            "bitness": "64-bit" if sys.maxsize > 2**32 else "32-bit",
            "version": version,
            "edition": edition,
        }
        return [KeyValueContext(key, Value.from_python(value)) for key, value in facts.items()]


def _directory(lookup: Callable[[], Any]) -> Value:
    try:
        return Value.from_python(str(lookup()))
    except (OSError, RuntimeError, KeyError):
        return Value.from_python("unknown")


def _real_name(username: str) -> str:
    try:
        import pwd

        gecos = pwd.getpwuid(os.getuid()).pw_gecos.split(",")[0].strip()
    except (ImportError, KeyError, AttributeError):
        return username
    return gecos or username


class UserContextProvider(ContextProvider):
    """Facts about the user running the program."""

    prefix = "user"

    def get_contexts(self) -> list[Context]:
        uid = os.getuid() if hasattr(os, "getuid") else 0
        username = getpass.getuser()
        return [
            KeyValueContext("id", Value.from_python(str(uid))),
            KeyValueContext("name", Value.from_python(_real_name(username))),
            KeyValueContext("username", Value.from_python(username)),
            KeyValueContext("home_dir", _directory(Path.home)),
            KeyValueContext("config_dir", _directory(platformdirs.user_config_dir)),
            KeyValueContext(
                "data_dir", _directory(lambda: platformdirs.user_data_dir(roaming=True))
            ),
            KeyValueContext("data_local_dir", _directory(platformdirs.user_data_dir)),
            KeyValueContext("document_dir", _directory(platformdirs.user_documents_dir)),
        ]


@dataclass
class VariablesContextProvider(ContextProvider):
    """Variables set in the configuration."""

    config: Config
    prefix: ClassVar[str] = "variables"

    def get_contexts(self) -> list[Context]:
        return [
            KeyValueContext(key, Value.from_python(value))
            for key, value in self.config.variables.items()
        ]


_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def _needs_escape(ch: str) -> bool:
    return ch in _ESCAPES or ord(ch) < 0x20 or ord(ch) == 0x7F


def _toml_string(text: str) -> str:
    if not any(_needs_escape(ch) for ch in text):
        return f'"{text}"'
    if "'" not in text and not any(
        ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text if ch != "\t"
    ):
        return f"'{text}'"
    escaped = "".join(
        _ESCAPES.get(ch, f"\\u{ord(ch):04X}" if _needs_escape(ch) else ch) for ch in text
    )
    return f'"{escaped}"'


def _toml_key(key: str) -> str:
    return key if _BARE_KEY.match(key) else _toml_string(key)


def _toml_display(value: Any) -> str:
    """Render a value the way a TOML value prints itself."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value != value:
            return "nan"
        if value in (float("inf"), float("-inf")):
            return "inf" if value > 0 else "-inf"
        return repr(value)
    if isinstance(value, str):
        return _toml_string(value)
    if isinstance(value, (_dt.datetime, _dt.date, _dt.time)):
        text = value.isoformat()
        return text[:-6] + "Z" if text.endswith("+00:00") else text
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(_toml_display(item) for item in value) + "]"
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = []
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValueError("table keys must be strings")
            items.append(f"{_toml_key(key)} = {_toml_display(item)}")
        return "{ " + ", ".join(items) + " }"
    raise ValueError(f"unsupported value type: {type(value).__name__}")


def _url_path(url: str) -> str:
    return urlsplit(url).path


def _to_str_map(values: Any) -> dict[str, str]:
    if not isinstance(values, Mapping):
        raise ValueError("expected a mapping at the top level")
    result = {}
    for key, value in values.items():
        if not isinstance(key, str):
            raise ValueError("keys must be strings")
        result[key] = _toml_display(value)
    return result


def _stringify_dates(value: Any) -> Any:
    if isinstance(value, (_dt.datetime, _dt.date)):
        return value.isoformat()
    if isinstance(value, list):
        return [_stringify_dates(item) for item in value]
    if isinstance(value, dict):
        return {key: _stringify_dates(item) for key, item in value.items()}
    return value


def toml_values(url: str) -> dict[str, str]:
    """Read the top-level entries of the TOML file the URL's path names."""
    contents = Path(_url_path(url)).read_text(encoding="utf-8")
    return _to_str_map(tomllib.loads(contents))


def yaml_values(url: str) -> dict[str, str]:
    """Read the top-level entries of the YAML file the URL's path names."""
    contents = Path(_url_path(url)).read_text(encoding="utf-8")
    return _to_str_map(_stringify_dates(yaml.safe_load(contents)))


def txt_record_values(url: str) -> dict[str, str]:
    """Read key=value pairs from the TXT records of the URL's host."""
    host = urlsplit(url).hostname
    if not host:
        raise ValueError("Failed to parse host")
    values = {}
    for record in dns.resolver.resolve(host, "TXT"):
        text = b"".join(record.strings).decode("utf-8", errors="replace")
        key, sep, value = text.partition("=")
        if sep:
            values[key] = value
    return values


_INCLUDE_READERS: dict[str, Callable[[str], dict[str, str]]] = {
    "dns+txt": txt_record_values,
    "file+toml": toml_values,
    "file+yaml": yaml_values,
}


@dataclass
class VariableIncludeContextProvider(ContextProvider):
    """Variables pulled in from files or DNS records listed in the configuration."""

    config: Config
    prefix: ClassVar[str] = "include_variables"

    def get_contexts(self) -> list[Context]:
        values: dict[str, str] = {}
        for include in self.config.include_variables or []:
            scheme = urlsplit(include).scheme
            if not scheme:
                raise ValueError(f"relative URL without a base: {include}")
            reader = _INCLUDE_READERS.get(scheme)
            if reader is None:
                raise ValueError(f"Unknown variable include scheme: {scheme}")
            values.update(reader(include))
        return [KeyValueContext(key, Value.from_python(value)) for key, value in values.items()]


@dataclass
class PrivilegeContextProvider(ContextProvider):
    """The configured privilege escalation tool."""

    config: Config
    prefix: ClassVar[str] = "privilege"

    def get_contexts(self) -> list[Context]:
        return [KeyValueContext("privilege", Value.from_python(str(self.config.privilege)))]


def build_contexts(config: Config) -> Contexts:
    """Collect every provider's values, keyed by prefix and sorted by key."""
    providers: list[ContextProvider] = [
        UserContextProvider(),
        OSContextProvider(),
        EnvContextProvider(),
        VariablesContextProvider(config),
        VariableIncludeContextProvider(config),
        PrivilegeContextProvider(config),
    ]
    contexts: Contexts = {}
    for provider in providers:
        try:
            found = provider.get_contexts()
        except Exception as error:  # noqa: BLE001 - a failing provider yields nothing
            logger.warning(
                "Error getting contexts from provider: %s -> %s", provider.prefix, error
            )
            found = []
        values: dict[str, Value] = {}
        for context in found:
            if isinstance(context, KeyValueContext):
                logger.debug("%s.%s = %s", provider.prefix, context.key, context.value)
                values[context.key] = context.value
            else:
                logger.debug("%s.%s = %r", provider.prefix, context.key, context.values)
                values[context.key] = Value.from_python(list(context.values))
        contexts[provider.prefix] = dict(sorted(values.items()))
    return dict(sorted(contexts.items()))


def to_template_context(contexts: Contexts) -> dict[str, dict[str, Any]]:
    """Turn contexts into plain data for template rendering."""
    return {
        prefix: {key: value.to_json() for key, value in values.items()}
        for prefix, values in contexts.items()
    }
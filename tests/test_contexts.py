import getpass
import os
import socket

import pytest

from provisio.config import Config, Privilege
from provisio.contexts import (
    EnvContextProvider,
    KeyValueContext,
    OSContextProvider,
    PrivilegeContextProvider,
    UserContextProvider,
    VariableIncludeContextProvider,
    VariablesContextProvider,
    build_contexts,
    to_template_context,
    toml_values,
    yaml_values,
)
from provisio.values import Value


def test_it_can_convert_to_template_context():
    contexts = {"user": {"username": Value.from_python("rawkode")}}
    rendered = to_template_context(contexts)
    assert "user" in rendered
    assert rendered["user"]["username"] == "rawkode"


def test_template_context_keeps_lists_and_numbers():
    contexts = {"x": {"items": Value.from_python(["a", 2]), "none": Value.from_python(None)}}
    assert to_template_context(contexts) == {"x": {"items": ["a", 2], "none": None}}


def test_variables_context_resolves_from_config():
    config = Config(variables={"ship_name": "Jack O'Neill", "ship_captain": "Thor"})
    contexts = build_contexts(config)
    variables = contexts.get("variables")
    assert variables is not None
    assert str(variables["ship_name"]) == "Jack O'Neill"
    assert str(variables["ship_captain"]) == "Thor"


def test_env_context(monkeypatch):
    monkeypatch.setenv("ASCENDED_NAME", "Morgan Le Fay")
    monkeypatch.setenv("REAL_NAME", "Ganos Lal")
    contexts = build_contexts(Config())
    env = contexts.get("env")
    assert env is not None
    assert str(env["ASCENDED_NAME"]) == "Morgan Le Fay"
    assert str(env["REAL_NAME"]) == "Ganos Lal"


def test_env_provider_lists_environment(monkeypatch):
    monkeypatch.setenv("PROVISIO_TEST_VAR", "value")
    found = {c.key: c.value for c in EnvContextProvider().get_contexts()}
    assert found["PROVISIO_TEST_VAR"] == Value.from_python("value")


def test_os_prefix():
    contexts = build_contexts(Config())
    assert OSContextProvider().prefix == "os"
    assert "hostname" in contexts["os"]


def test_os_contexts():
    found = {c.key: str(c.value) for c in OSContextProvider().get_contexts()}
    assert set(found) == {
        "hostname",
        "family",
        "name",
        "distribution",
        "codename",
        "bitness",
        "version",
        "edition",
    }
    assert found["hostname"] == socket.gethostname()
    assert found["family"] == ("windows" if os.name == "nt" else "unix")


def test_user_contexts():
    found = {c.key: str(c.value) for c in UserContextProvider().get_contexts()}
    assert found["username"] == getpass.getuser()
    assert found["id"].isdigit()
    assert {"home_dir", "config_dir", "data_dir", "data_local_dir", "document_dir"} <= set(found)


def test_variables_provider():
    provider = VariablesContextProvider(Config(variables={"ship_captain": "Thor"}))
    assert provider.get_contexts() == [
        KeyValueContext("ship_captain", Value.from_python("Thor"))
    ]


def test_privilege_provider():
    provider = PrivilegeContextProvider(Config(privilege=Privilege.DOAS))
    assert provider.get_contexts() == [KeyValueContext("privilege", Value.from_python("doas"))]


def test_build_contexts_has_all_prefixes_sorted():
    contexts = build_contexts(Config())
    assert list(contexts) == sorted(
        ["user", "os", "env", "variables", "include_variables", "privilege"]
    )
    for values in contexts.values():
        assert list(values) == sorted(values)
    assert str(contexts["privilege"]["privilege"]) == "sudo"


def test_toml_values(tmp_path):
    path = tmp_path / "vars.toml"
    path.write_text('name = "Thor"\nage = 3\n', encoding="utf-8")
    assert toml_values(f"file+toml://{path.as_posix()}") == {"name": '"Thor"', "age": "3"}


def test_yaml_values(tmp_path):
    path = tmp_path / "vars.yaml"
    path.write_text("name: Thor\nage: 3\n", encoding="utf-8")
    assert yaml_values(f"file+yaml://{path.as_posix()}") == {"name": '"Thor"', "age": "3"}


def test_toml_values_missing_file(tmp_path):
    with pytest.raises(OSError):
        toml_values(f"file+toml://{(tmp_path / 'missing.toml').as_posix()}")


def test_variable_include_provider(tmp_path):
    path = tmp_path / "vars.toml"
    path.write_text('ship = "Daedalus"\n', encoding="utf-8")
    config = Config(include_variables=[f"file+toml://{path.as_posix()}"])
    found = VariableIncludeContextProvider(config).get_contexts()
    assert found == [KeyValueContext("ship", Value.from_python('"Daedalus"'))]


def test_variable_include_unknown_scheme():
    config = Config(include_variables=["ftp://example.com/vars"])
    with pytest.raises(ValueError, match="Unknown variable include scheme"):
        VariableIncludeContextProvider(config).get_contexts()


def test_build_contexts_tolerates_failing_include():
    contexts = build_contexts(Config(include_variables=["ftp://example.com/vars"]))
    assert contexts["include_variables"] == {}
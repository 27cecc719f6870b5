import pytest

from provisio.config import Config, Privilege


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Sudo", "sudo"),
        ("Doas", "doas"),
        ("Run0", "run0"),
    ],
)
def test_privilege_display(text, expected):
    assert str(Privilege.parse(text)) == expected


@pytest.mark.parametrize(
    "text, expected",
    [
        ("sudo", Privilege.SUDO),
        ("Sudo", Privilege.SUDO),
        ("doas", Privilege.DOAS),
        ("Doas", Privilege.DOAS),
        ("run0", Privilege.RUN0),
        ("Run0", Privilege.RUN0),
    ],
)
def test_privilege_parse(text, expected):
    assert Privilege.parse(text) is expected


def test_privilege_parse_round_trips_display():
    for member in Privilege:
        assert Privilege.parse(str(member)) is member


def test_privilege_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Privilege.parse("su")


def test_default_config():
    config = Config()
    assert config.privilege is Privilege.SUDO
    assert config.manifest_paths == []
    assert config.variables == {}
    assert config.include_variables is None
    assert config.disable_update_check is False


def test_from_empty_dict_matches_default():
    assert Config.from_dict({}) == Config()


def test_from_dict_reads_fields():
    config = Config.from_dict(
        {
            "manifest_paths": ["./manifests"],
            "variables": {"ship_name": "Jack O'Neill", "ship_captain": "Thor"},
            "include_variables": ["file+toml:///etc/vars.toml"],
            "disable_update_check": True,
            "privilege": "doas",
        }
    )
    assert config.manifest_paths == ["./manifests"]
    assert config.variables["ship_captain"] == "Thor"
    assert list(config.variables) == sorted(config.variables)
    assert config.include_variables == ["file+toml:///etc/vars.toml"]
    assert config.disable_update_check is True
    assert config.privilege is Privilege.DOAS


def test_from_dict_rejects_bad_privilege():
    with pytest.raises(ValueError):
        Config.from_dict({"privilege": "root"})


def test_from_dict_rejects_non_string_variables():
    with pytest.raises(TypeError):
        Config.from_dict({"variables": {"answer": 42}})
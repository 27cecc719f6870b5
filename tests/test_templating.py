import jinja2
import pytest

from provisio.templating import create_environment, read_file_contents, render_string


def test_can_read_from_file(tmp_path):
    target = tmp_path / "content.txt"
    target.write_text("\nFKBR\nKUCI\nSXOE\n\n")

    template = '{{ read_file_contents(path="%s") }}' % target.as_posix()
    content = render_string(template, {})

    assert content == "FKBR\nKUCI\nSXOE"


def test_read_file_contents_strips(tmp_path):
    target = tmp_path / "value"
    target.write_text("  secret-ish value \n")
    assert read_file_contents(str(target)) == "secret-ish value"


def test_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        read_file_contents(str(tmp_path / "absent"))


def test_non_string_path_raises():
    with pytest.raises(TypeError, match="Cannot convert argument 'path' to str"):
        read_file_contents(42)


def test_render_with_context():
    assert render_string("Hi {{ user.name }}!", {"user": {"name": "Ada"}}) == "Hi Ada!"


def test_undefined_variable_is_an_error():
    with pytest.raises(jinja2.UndefinedError):
        render_string("{{ missing.value }}", {})


def test_environment_registers_function(tmp_path):
    target = tmp_path / "f"
    target.write_text("abc\n")
    env = create_environment()
    rendered = env.from_string("{{ read_file_contents(p) }}").render(p=str(target))
    assert rendered == "abc"
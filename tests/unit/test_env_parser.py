import pytest
from composekit.PARSERS.env_parser import EnvParser
from composekit.exceptions import NotFoundError, ParseError


def test_parse_from_string():
    content = """
    KEY1=VALUE1
    KEY2 = VALUE2
    # This is a comment
    KEY3="VALUE3" # Trailing comment
    KEY4='VALUE4'
    export KEY5=exported
    KEY6=plain # comment
    KEY7="say \\"hi\\""
    KEY8=
    NOT_AN_ASSIGNMENT
    """
    env = EnvParser.parse_from_string(content)
    assert env['KEY1'] == 'VALUE1'
    assert env['KEY2'] == 'VALUE2'
    assert env['KEY3'] == 'VALUE3'
    assert env['KEY4'] == 'VALUE4'
    assert env['KEY5'] == 'exported'
    assert env['KEY6'] == 'plain'
    assert env['KEY7'] == 'say "hi"'
    assert env['KEY8'] == ''
    assert 'NOT_AN_ASSIGNMENT' not in env


def test_hash_inside_value_kept():
    env = EnvParser.parse_from_string("URL=http://host/#anchor\nQ='a # b'\n")
    assert env['URL'] == 'http://host/#anchor'
    assert env['Q'] == 'a # b'


def test_parse_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("TAG=1.2\nTAG=1.3\n")
    assert EnvParser.parse(str(env_file)) == {'TAG': '1.3'}


def test_values_not_expanded():
    env = EnvParser.parse_from_string("HOST=db\nURL=postgres://${HOST}/app\n")
    assert env['URL'] == 'postgres://${HOST}/app'


def test_invalid_utf8_is_parse_error(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_bytes(b"A=\xff\xfe\n")
    with pytest.raises(ParseError) as exc:
        EnvParser.parse(str(env_file))
    assert exc.value.path == str(env_file)


def test_unreadable_path_is_not_found(tmp_path):
    with pytest.raises(NotFoundError):
        EnvParser.parse(str(tmp_path))

import json
import pytest
import yaml
from click.testing import CliRunner
from composekit.CLI.main import cli


@pytest.fixture
def project(tmp_path):
    (tmp_path / "compose.yaml").write_text(
        "services:\n"
        "  db:\n"
        "    image: postgres:16\n"
        "  backend:\n"
        "    image: shop/backend\n"
        "    profiles: [dev]\n"
        "    depends_on: [db]\n"
        "    ports: ['8000:8000']\n"
    )
    (tmp_path / "compose.override.yaml").write_text(
        "services:\n"
        "  backend:\n"
        "    ports: ['5678:5678']\n"
    )
    return tmp_path


def invoke(args, env=None):
    runner = CliRunner()
    return runner.invoke(cli, args, obj={}, env=env or {'COMPOSE_FILE': '', 'COMPOSE_PROFILES': ''})


def test_cli_help():
    result = invoke(['--help'])
    assert result.exit_code == 0
    assert 'resolve compose profiles' in result.output


def test_services_without_profile(project):
    result = invoke(['--project-directory', str(project), 'services'])
    assert result.exit_code == 0
    assert result.output.split() == ['db']


def test_services_with_profile(project):
    result = invoke(['--project-directory', str(project), '--profile', 'dev', 'services'])
    assert result.exit_code == 0
    assert result.output.split() == ['db', 'backend']


def test_profiles_from_environment(project):
    result = invoke(['--project-directory', str(project), 'services'],
                    env={'COMPOSE_PROFILES': 'dev', 'COMPOSE_FILE': ''})
    assert result.output.split() == ['db', 'backend']


def test_config_yaml(project):
    result = invoke(['--project-directory', str(project), '--profile', 'dev', 'config'])
    assert result.exit_code == 0
    data = yaml.safe_load(result.output)
    assert data['services']['backend']['ports'] == ['8000:8000', '5678:5678']


def test_config_json(project):
    result = invoke(['--project-directory', str(project), 'config', '--format', 'json'])
    assert result.exit_code == 0
    assert list(json.loads(result.output)['services']) == ['db']


def test_profiles(project):
    result = invoke(['--project-directory', str(project), 'profiles'])
    assert result.exit_code == 0
    assert result.output.split() == ['dev']


def test_files(project):
    result = invoke(['--project-directory', str(project), 'files'])
    assert result.exit_code == 0
    assert result.output.splitlines() == [
        str(project / "compose.yaml"),
        str(project / "compose.override.yaml"),
    ]


def test_explicit_file_disables_override(project):
    base = str(project / "compose.yaml")
    result = invoke(['-f', base, 'files'])
    assert result.output.splitlines() == [base]


def test_order(project):
    result = invoke(['--project-directory', str(project), '--profile', 'dev', 'order'])
    assert result.exit_code == 0
    lines = result.output.splitlines()[2:]
    assert [line.split()[1] for line in lines] == ['db', 'backend']


def test_missing_file_exit_code(tmp_path):
    result = invoke(['-f', str(tmp_path / 'non_existent.yml'), 'config'])
    assert result.exit_code == 1
    assert 'Error: Compose file not found' in result.output


def test_no_compose_file_in_directory(tmp_path):
    result = invoke(['--project-directory', str(tmp_path), 'services'])
    assert result.exit_code == 1
    assert 'No compose file found' in result.output


def test_compose_file_relative_to_project_directory(project):
    result = invoke(['--project-directory', str(project), 'files'],
                    env={'COMPOSE_FILE': 'compose.yaml', 'COMPOSE_PROFILES': ''})
    assert result.exit_code == 0
    assert result.output.split() == [str(project / "compose.yaml")]


def test_deep_dependency_chain_order(tmp_path):
    depth = 1500
    lines = ["services:"]
    for i in range(depth):
        lines.append(f"  s{i}:\n    depends_on: [s{i + 1}]")
    lines.append(f"  s{depth}: {{}}")
    (tmp_path / "compose.yaml").write_text("\n".join(lines) + "\n")
    result = invoke(['--project-directory', str(tmp_path), 'order'])
    assert result.exit_code == 0
    lines = result.output.splitlines()[2:]
    assert len(lines) == depth + 1
    assert lines[0].split()[1] == f"s{depth}"
    assert lines[-1].split()[1] == "s0"

import pytest
from click.testing import CliRunner
from cdeploy.CLI.main import cli

COMPOSE = """
services:
  web:
    image: team/web:1
  db:
    image: team/db:1
"""


@pytest.fixture
def patched_docker(monkeypatch, fake_docker):
    """Routes every DockerCli construction to one fake."""
    holder = {}

    def install(**kwargs):
        fake = fake_docker(**kwargs)
        for target in ("cdeploy.MANAGERS.deploy_workflow.DockerCli",
                       "cdeploy.MANAGERS.app_manager.DockerCli",
                       "cdeploy.CLI.main.DockerCli",
                       "cdeploy.CLI.menu.DockerCli"):
            monkeypatch.setattr(target, lambda config, fake=fake: fake)
        holder['fake'] = fake
        return fake
    return install


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ['--help'])
    assert result.exit_code == 0
    assert 'deploy' in result.output
    assert '--compose-command' in result.output


def test_cli_deploy_no_file(tmp_path, patched_docker):
    patched_docker()
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'deploy', '--no-recreate'])
    assert result.exit_code == 1
    assert 'docker-compose.yml does not exist' in result.output


def test_cli_deploy_no_recreate(tmp_path, patched_docker):
    (tmp_path / 'docker-compose.yml').write_text(COMPOSE)
    fake = patched_docker(services=['web', 'db'], containers=['app-web-1'], bound={'web': 'app-web-1'})
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'deploy', '--no-recreate'])
    assert result.exit_code == 0, result.output
    assert fake.calls_of('up') == [('up', 'db', False)]
    assert 'Deployment finished' in result.output


def test_cli_deploy_failure_prints_summary(tmp_path, patched_docker):
    (tmp_path / 'docker-compose.yml').write_text(COMPOSE)
    patched_docker(services=['web', 'db'], failing_up=['web'])
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'deploy', '--no-recreate'])
    assert result.exit_code == 1
    assert 'Deployment failed: service web' in result.output
    assert 'Deployment finished' not in result.output


def test_cli_deploy_prompts_without_flag(tmp_path, patched_docker):
    (tmp_path / 'docker-compose.yml').write_text(COMPOSE)
    fake = patched_docker(services=['web'], containers=['app-web-1'], bound={'web': 'app-web-1'})
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'deploy'], input='y\n')
    assert result.exit_code == 0, result.output
    assert fake.calls_of('up') == [('up', 'web', True)]


def test_cli_down_single_service(tmp_path, patched_docker):
    (tmp_path / 'docker-compose.yml').write_text(COMPOSE)
    fake = patched_docker()
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'down', 'web', '--yes'])
    assert result.exit_code == 0
    assert fake.calls == [('stop', 'web'), ('rm', 'web', False, False)]


def test_cli_down_cancelled(tmp_path, patched_docker):
    (tmp_path / 'docker-compose.yml').write_text(COMPOSE)
    fake = patched_docker()
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'down'], input='n\n')
    assert result.exit_code == 0
    assert fake.calls == []
    assert 'Operation cancelled' in result.output


def test_cli_load(tmp_path, patched_docker, make_archive):
    make_archive('app.tar', tags=['app:1'])
    fake = patched_docker(images=['app:1'])
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'load'])
    assert result.exit_code == 0
    assert fake.calls_of('load') == []
    assert 'already exists' in result.output


def test_cli_services(tmp_path):
    (tmp_path / 'docker-compose.yml').write_text(COMPOSE)
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path), 'services'])
    assert result.exit_code == 0
    assert result.output.split() == ['web', 'team/web:1', 'db', 'team/db:1']


def test_cli_env_prefix(tmp_path):
    (tmp_path / 'stack.yml').write_text(COMPOSE)
    runner = CliRunner()
    result = runner.invoke(
        cli, ['services'],
        env={'CDEPLOY_FILE': 'stack.yml', 'CDEPLOY_WORKING_DIR': str(tmp_path)},
        auto_envvar_prefix='CDEPLOY',
    )
    assert result.exit_code == 0
    assert 'team/web:1' in result.output


def test_cli_rejects_empty_suffix():
    runner = CliRunner()
    result = runner.invoke(cli, ['--archive-suffix', '', 'services'])
    assert result.exit_code == 2


def test_cli_without_command_starts_menu(tmp_path, patched_docker):
    patched_docker()
    runner = CliRunner()
    result = runner.invoke(cli, ['-C', str(tmp_path)], input='q\n')
    assert result.exit_code == 0
    assert 'Goodbye' in result.output

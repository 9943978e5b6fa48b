# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Command Line Interface for cdeploy.
"""
import click
import os
import yaml
from pydantic import ValidationError
from ..MODELS.deploy_config import DeployConfig
from ..MANAGERS.app_manager import AppManager
from ..MANAGERS.deploy_workflow import DeployWorkflow, PreconditionError
from ..MANAGERS.image_loader import ImageLoader
from ..PARSERS.compose_parser import ComposeParser
from ..RUNNERS.command_runner import CommandError, DockerCli
from ..UTILS.console import Console
from ..UTILS.string_interpolation import InterpolationError
from .menu import MainMenu

FAILURES = (CommandError, PreconditionError, InterpolationError)


@click.group(invoke_without_command=True)
@click.option('--file', '-f', default='docker-compose.yml', show_default=True, help='Compose file, relative to --dir')
@click.option('--dir', '-C', 'working_dir', default='.', type=click.Path(file_okay=False),
              help='Directory holding the compose file and image archives')
@click.option('--compose-command', default='docker-compose', show_default=True,
              help="Compose executable, e.g. 'docker compose'")
@click.option('--docker-command', default='docker', show_default=True, help='Docker executable')
@click.option('--archive-suffix', default='.tar', show_default=True, help='Extension of image archives')
@click.option('--verbose', '-v', is_flag=True, help='Echo every docker command before running it')
@click.pass_context
def cli(ctx, file, working_dir, compose_command, docker_command, archive_suffix, verbose):
    """
    cdeploy - deploy and manage a docker-compose application.

    Without a command, starts the interactive menu.
    """
    ctx.ensure_object(dict)
    try:
        ctx.obj['config'] = DeployConfig(
            working_dir=working_dir,
            compose_file=file,
            archive_suffix=archive_suffix,
            docker_command=docker_command,
            compose_command=compose_command,
            verbose=verbose,
        )
    except ValidationError as e:
        raise click.UsageError(str(e))
    ctx.obj['console'] = Console()

    if ctx.invoked_subcommand is None:
        ctx.invoke(menu)


@cli.command()
@click.pass_context
def menu(ctx):
    """Start the interactive menu."""
    code = MainMenu(ctx.obj['config'], console=ctx.obj['console']).run()
    ctx.exit(code)


@cli.command()
@click.option('--recreate/--no-recreate', default=None,
              help='Answer the recreate question for existing containers instead of prompting')
@click.pass_context
def deploy(ctx, recreate):
    """Load image archives and create the stack's containers."""
    config = ctx.obj['config']
    console = ctx.obj['console']

    if recreate is None:
        def confirm(service, container):
            return click.confirm(f"Force recreate the container of service {service}?", default=False)
    else:
        def confirm(service, container):
            return recreate

    try:
        result = DeployWorkflow(config, confirm=confirm, console=console).run()
    except FAILURES as e:
        console.error(str(e))
        ctx.exit(1)
    if not result.ok:
        console.error(result.summary())
        ctx.exit(1)
    console.success(result.summary())


@cli.command()
@click.argument('service', required=False)
@click.option('--yes', '-y', is_flag=True, help='Do not ask for confirmation')
@click.pass_context
def down(ctx, service, yes):
    """Uninstall one SERVICE, or the whole stack."""
    console = ctx.obj['console']
    manager = AppManager(ctx.obj['config'])
    target = f"service '{service}'" if service else "all services"
    if not yes and not click.confirm(f"Really uninstall {target}?", default=False):
        console.info("Operation cancelled")
        return
    try:
        if service:
            manager.uninstall_service(service)
        else:
            manager.uninstall_all()
    except FAILURES as e:
        console.error(str(e))
        ctx.exit(1)
    console.success(f"Uninstalled {target}")


@cli.command()
@click.pass_context
def load(ctx):
    """Load image archives without touching containers."""
    config = ctx.obj['config']
    console = ctx.obj['console']
    try:
        report = ImageLoader(config, DockerCli(config), console).load_all()
    except CommandError as e:
        console.error(str(e))
        ctx.exit(1)
    if not report.ok:
        ctx.exit(1)


@cli.command()
@click.pass_context
def services(ctx):
    """List the services declared in the compose file."""
    config = ctx.obj['config']
    if not os.path.isfile(config.compose_path):
        ctx.obj['console'].error(f"{config.compose_file} does not exist")
        ctx.exit(1)
    try:
        project = ComposeParser().parse(config.compose_path)
    except (yaml.YAMLError, ValueError) as e:
        ctx.obj['console'].error(f"{config.compose_file} is not a valid compose file: {e}")
        ctx.exit(1)
    for name, svc in project.services.items():
        click.echo(f"{name:20} {svc.image or '-'}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={}, auto_envvar_prefix='CDEPLOY')


if __name__ == '__main__':
    main()

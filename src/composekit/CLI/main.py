"""
Command Line Interface for composekit.
"""
import json
import logging
import click
import yaml
from ..RESOLVERS.pipeline import ComposeResolver
from ..RUNNERS.dependency_resolver import DependencyResolver
from ..UTILS.compose_env import files_from_env, profiles_from_env
from ..exceptions import ComposeError

logger = logging.getLogger(__name__)


@click.group()
@click.option('--file', '-f', 'files', multiple=True, help='Compose file path (repeatable, replaces override discovery)')
@click.option('--profile', 'profiles', multiple=True, help='Profile to enable (repeatable)')
@click.option('--project-directory', default=None, help='Directory holding the compose and .env files')
@click.option('--env-file', default=None, help='Env file used for variable interpolation')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, files, profiles, project_directory, env_file, verbose):
    """
    composekit - resolve compose profiles and override files.

    Computes which services a profile selection activates and their merged
    configuration, without starting anything.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )
    ctx.ensure_object(dict)
    ctx.obj['files'] = list(files) or files_from_env(project_dir=project_directory)
    ctx.obj['profiles'] = list(profiles) or profiles_from_env()
    ctx.obj['resolver'] = ComposeResolver(project_dir=project_directory, env_file=env_file)


def _fail(ctx, error: ComposeError):
    logger.debug("Resolution failed: %r", error.to_dict())
    click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


@cli.command()
@click.option('--format', 'fmt', type=click.Choice(['yaml', 'json']), default='yaml', help='Output format')
@click.pass_context
def config(ctx, fmt):
    """Print the resolved configuration of the active services."""
    try:
        active = ctx.obj['resolver'].resolve(files=ctx.obj['files'], profiles=ctx.obj['profiles'])
    except ComposeError as e:
        _fail(ctx, e)
        return

    data = active.to_compose()
    if fmt == 'json':
        click.echo(json.dumps(data, indent=2, default=str))
    else:
        click.echo(yaml.safe_dump(data, sort_keys=False, default_flow_style=False), nl=False)


@cli.command()
@click.pass_context
def services(ctx):
    """List the active services"""
    try:
        active = ctx.obj['resolver'].resolve(files=ctx.obj['files'], profiles=ctx.obj['profiles'])
    except ComposeError as e:
        _fail(ctx, e)
        return
    for name in active.names:
        click.echo(name)


@cli.command()
@click.pass_context
def profiles(ctx):
    """List every profile declared by any service"""
    try:
        resolved = ctx.obj['resolver'].resolve_config(files=ctx.obj['files'])
    except ComposeError as e:
        _fail(ctx, e)
        return
    for name in resolved.profiles:
        click.echo(name)


@cli.command()
@click.pass_context
def files(ctx):
    """List the compose files that would be loaded, in merge order"""
    try:
        paths = ctx.obj['resolver'].resolve_files(files=ctx.obj['files'])
    except ComposeError as e:
        _fail(ctx, e)
        return
    for path in paths:
        click.echo(path)


@cli.command()
@click.pass_context
def order(ctx):
    """Print the startup order of the active services"""
    try:
        active = ctx.obj['resolver'].resolve(files=ctx.obj['files'], profiles=ctx.obj['profiles'])
        startup = DependencyResolver().resolve_order(active)
    except ComposeError as e:
        _fail(ctx, e)
        return
    click.echo(f"{'#':3} {'SERVICE':15}")
    click.echo("-" * 19)
    for position, name in enumerate(startup, 1):
        click.echo(f"{position:<3} {name:15}")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()

"""Command line entry point: git-chrono --repo PATH."""

import logging
from typing import Optional

import click

from gitchrono.config import OutputMode, TimeSource
from gitchrono.dag.resolver import ConsistencyResolver
from gitchrono.errors import CommitReadError, ConfigurationError, RepositoryOpenError
from gitchrono.git_objects.repository import GitRepository
from gitchrono.report import render

EXIT_USAGE = 1
EXIT_REPOSITORY = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.ERROR,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.command()
@click.option("--repo", "repo_path", envvar="GIT_CHRONO_REPO",
              help="Path to the git repository (working tree or git directory).")
@click.option("--type", "time_type", default="author", show_default=True,
              help='Timestamp to check, "author" or "committer".')
@click.option("--output", "output", default="short", show_default=True,
              help='Report type, "short", "long" or "errors".')
@click.option("-v", "--verbose", is_flag=True, help="Log traversal details to stderr.")
@click.version_option(package_name="git-chrono")
@click.pass_context
def main(ctx: click.Context, repo_path: Optional[str], time_type: str, output: str, verbose: bool):
    """Report commits dated earlier than their parents, and the corrected dates."""
    _configure_logging(verbose)

    if not repo_path or not repo_path.strip():
        click.echo("Usage: git-chrono --repo PATH [--type=<type>] [--output=<output type>]", err=True)
        click.echo(ctx.get_help(), err=True)
        ctx.exit(EXIT_USAGE)

    # Configuration is validated before anything touches the repository
    try:
        time_source = TimeSource.parse(time_type)
        mode = OutputMode.parse(output)
    except ConfigurationError as e:
        click.echo(f"error: {e}", err=True)
        ctx.exit(EXIT_USAGE)

    try:
        repository = GitRepository.open(repo_path)
    except RepositoryOpenError as e:
        click.echo(f"error: {e}", err=True)
        ctx.exit(EXIT_REPOSITORY)

    resolution = ConsistencyResolver(repository, time_source).resolve_all()
    try:
        lines = render(mode, resolution, repository, time_source)
    except CommitReadError as e:
        click.echo(f"error: {e}", err=True)
        ctx.exit(EXIT_REPOSITORY)

    for line in lines:
        click.echo(line)


if __name__ == "__main__":
    main()

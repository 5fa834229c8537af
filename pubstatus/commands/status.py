"""
Handles the 'status' command for displaying fleet publication status.

- Interactive terminal: table by default
- Piped/redirected: JSONL streaming by default, one record per project
- Records always come out in project-list order
"""

import sys

import click

from ..config import load_config, load_projects, configure_logging, get_github_token
from ..cli_utils import standard_command, add_common_options
from ..exit_codes import NoProjectsFoundError, PartialSuccessError
from ..infra import GitHubClient, ManifestClient
from ..render import render_fleet_table, render_summary
from ..services import ProjectService, FleetService


def build_fleet_service(config, max_concurrency=None) -> FleetService:
    """Wire clients and services from configuration."""
    github_cfg = config.get('github', {})
    manifest_cfg = config.get('manifest', {})

    github = GitHubClient(
        token=get_github_token(config),
        graphql_url=github_cfg.get('graphql_url') or 'https://api.github.com/graphql',
        timeout=github_cfg.get('timeout_seconds', 30),
        page_size=github_cfg.get('page_size', 100),
    )
    manifests = ManifestClient(
        proxy_base_url=manifest_cfg.get('proxy_base_url'),
        timeout=manifest_cfg.get('timeout_seconds', 30),
    )
    projects = ProjectService(github_client=github, manifest_client=manifests, config=config)
    return FleetService(projects, max_concurrency=max_concurrency, config=config)


@click.command(name='status')
@click.argument('projects_file', required=False, type=click.Path(dir_okay=False))
@click.option('--table/--no-table', default=None, help='Display as formatted table (auto-detected by default)')
@click.option('--show-stale/--hide-stale', default=None, help='Show branches with no commit in 90 days')
@click.option('--show-unpublished/--hide-unpublished', default=None,
              help='Show tagged versions missing from the published manifest')
@click.option('--max-concurrency', type=int, default=None,
              help='Projects fetched at once (0 = unbounded)')
@click.option('--strict', is_flag=True, help='Exit with code 71 if any project is unavailable')
@add_common_options('verbose', 'quiet', 'format', 'fields')
@standard_command
def status_handler(projects_file, table, show_stale, show_unpublished, max_concurrency,
                   strict, progress, verbose, quiet, **kwargs):
    """Show publication status of every tracked project.

    PROJECTS_FILE: YAML/JSON project list (default: general.projects_file)

    \b
    For each project shows branch freshness, repository version tags,
    published versions and the versions missing on either side.

    Examples:

    \b
        pubstatus status                      # Uses igs.yaml from config
        pubstatus status igs.yaml --table     # Force table output
        pubstatus status --no-table -f csv    # One summary row per project
        pubstatus status --show-stale         # Include stale branches
    """
    config = load_config()
    configure_logging(config, verbose=verbose)

    if table is None:
        table = sys.stdout.isatty() and not kwargs.get('format')

    display = config.get('display', {})
    if show_stale is None:
        show_stale = display.get('show_stale_branches', False)
    if show_unpublished is None:
        show_unpublished = display.get('show_unpublished_tags', True)

    projects_file = projects_file or config.get('general', {}).get('projects_file', 'igs.yaml')
    projects = load_projects(projects_file)
    if not projects:
        raise NoProjectsFoundError(f"No projects listed in {projects_file}")

    progress(f"Loaded {len(projects)} projects from {projects_file}")

    fleet = build_fleet_service(config, max_concurrency=max_concurrency)
    with progress.task("Checking projects", total=len(projects)) as update:
        records = fleet.aggregate(
            projects,
            on_complete=lambda done, total, record: update(done, record.name),
        )

    if table:
        render_fleet_table(records, show_stale_branches=show_stale, show_unpublished_tags=show_unpublished)
        render_summary(records)
    else:
        for record in records:
            yield record.to_dict()

    failed = sum(1 for r in records if r.is_degraded)
    if failed:
        progress.warning(f"{failed}/{len(records)} projects unavailable")
        if strict:
            raise PartialSuccessError(
                f"{failed} of {len(records)} projects could not be loaded",
                succeeded=len(records) - failed,
                failed=failed,
            )

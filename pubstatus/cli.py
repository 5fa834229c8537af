#!/usr/bin/env python3

import click

from pubstatus.commands.status import status_handler
from pubstatus.commands.proxy import proxy_handler
from pubstatus.commands.config import config_cmd


@click.group()
@click.version_option(package_name='pubstatus')
def cli():
    """pubstatus - Publication status of a fleet of tracked projects.

    Reconciles repository branches and version tags with the versions
    actually published for each project.
    """
    pass


cli.add_command(status_handler)
cli.add_command(proxy_handler)
cli.add_command(config_cmd)


def main():
    cli()

if __name__ == "__main__":
    main()

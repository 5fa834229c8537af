import json

import click

from ..config import load_config, save_config, get_config_path, get_default_config


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--pretty", is_flag=True, help="Display as formatted JSON instead of single-line JSONL")
@click.option("--path", is_flag=True, help="Show the config file path being used")
def show_config(pretty, path):
    """Show the current configuration with all merges applied.

    The GitHub token is masked.
    """
    if path:
        click.echo(json.dumps({"config_path": str(get_config_path())}))
        return

    config = load_config()
    if config.get('github', {}).get('token'):
        config['github']['token'] = '***'

    if pretty:
        click.echo(json.dumps(config, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps(config, ensure_ascii=False))


@config_cmd.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file")
def init_config(force):
    """Write the default configuration to ~/.pubstatus/config.json."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        raise click.ClickException(f"Configuration already exists at {config_path} (use --force)")

    saved_path = save_config(get_default_config())
    click.echo(json.dumps({"config_path": str(saved_path)}))

"""
Handles the 'proxy' command: shows where a published manifest is fetched from.
"""

import click

from ..config import load_config
from ..infra import ManifestClient, resolve_proxy_url


@click.command(name='proxy')
@click.argument('published_url')
@click.option('--absolute', is_flag=True, help='Join the proxy path onto manifest.proxy_base_url')
def proxy_handler(published_url, absolute):
    """Print the manifest location for a published site URL.

    \b
    Examples:
        pubstatus proxy https://smart.who.int/anc
        pubstatus proxy https://build.fhir.org/ig/HL7/example --absolute
    """
    if absolute:
        config = load_config()
        client = ManifestClient(proxy_base_url=config.get('manifest', {}).get('proxy_base_url'))
        click.echo(client.manifest_url(published_url))
    else:
        click.echo(resolve_proxy_url(published_url))

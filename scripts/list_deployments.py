#!/usr/bin/python3

import click

from jpyc_deployment.registry import deployments_dir, list_deployments, read_latest


@click.command(name="list-deployments")
@click.option(
    "--network-key",
    "-n",
    help="Network the deployments are filed under, e.g. base-sepolia",
    type=str,
    required=True,
)
def cli(network_key):
    """List the recorded deployments of a network."""
    click.secho(f"\nDeployments in {deployments_dir()}", fg="green")

    latest = read_latest(network_key)
    if latest is None:
        click.secho(f"    No deployment recorded for {network_key}", fg="yellow")
        return

    click.secho(f"    Latest: proxy {latest.proxy}", fg="yellow")
    click.secho(f"        implementation {latest.implementation_v2 or latest.implementation}")

    for index, record in enumerate(list_deployments(network_key), start=1):
        upgraded = " (upgraded)" if record.implementation_v2 else ""
        click.secho(f"        {index}. {record.deployed_at} {record.proxy}{upgraded}", fg="cyan")


if __name__ == "__main__":
    cli()

#!/usr/bin/python3

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, account_option, network_option

from jpyc_deployment.constants import DEPLOY_TASK
from jpyc_deployment.deployer import TokenDeployer
from jpyc_deployment.options import autosign_option, params_option
from jpyc_deployment.params import load_params
from jpyc_deployment.utils import check_plugins, network_key


def _deploy(account, params_path, verify, v1only, autosign):
    check_plugins(verify=verify)
    params = load_params(params_path)
    deployer = TokenDeployer(account=account, autosign=autosign, network_name=network_key())
    deployer.print_deployment_info(params=params, verify=verify)
    record = deployer.deploy(params=params, verify=verify, v1only=v1only)
    click.secho(f"[{DEPLOY_TASK}] deployment complete: proxy={record.proxy}", fg="green")
    return record


@click.command(cls=ConnectedProviderCommand)
@network_option()
@account_option()
@click.argument("target_network", required=False, default=None)
@params_option
@click.option(
    "--verify",
    help="Verify implementation on the block explorer after deployment",
    is_flag=True,
    default=False,
)
@click.option(
    "--v1only",
    help="Skip auto-upgrade to FiatTokenV2",
    is_flag=True,
    default=False,
)
@autosign_option
def cli(network, account, target_network, params_path, verify, v1only, autosign):
    """Deploy the JPYC v2 proxy and upgrade it to FiatTokenV2."""
    if target_network and target_network not in (network.name, network.choice):
        click.echo(f"[{DEPLOY_TASK}] switching network to {target_network}")
        with networks.parse_network_choice(target_network):
            return _deploy(account, params_path, verify, v1only, autosign)

    return _deploy(account, params_path, verify, v1only, autosign)


if __name__ == "__main__":
    cli()

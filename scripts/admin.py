#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from jpyc_deployment import tasks
from jpyc_deployment.constants import ROLE_METHODS
from jpyc_deployment.deployer import Transactor
from jpyc_deployment.options import autosign_option, contract_option, minter_option
from jpyc_deployment.types import ChecksumAddress
from jpyc_deployment.utils import network_key


@click.group()
def cli():
    """JPYC token administration"""


@cli.command(cls=ConnectedProviderCommand, name="configure-minter")
@account_option()
@network_option()
@contract_option
@minter_option
@click.option(
    "--allowance",
    help="Allowance amount in smallest units",
    type=str,
    required=True,
)
@autosign_option
def configure_minter(account, network, contract, minter, allowance, autosign):
    """Grant or update minter allowance"""
    transactor = Transactor(account=account, autosign=autosign)
    token = tasks.get_token(contract=contract, network_name=network_key(network))
    tasks.configure_minter(token, transactor, minter=minter, allowance=allowance)


@cli.command(cls=ConnectedProviderCommand, name="remove-minter")
@account_option()
@network_option()
@contract_option
@minter_option
@autosign_option
def remove_minter(account, network, contract, minter, autosign):
    """Revoke minter role"""
    transactor = Transactor(account=account, autosign=autosign)
    token = tasks.get_token(contract=contract, network_name=network_key(network))
    tasks.remove_minter(token, transactor, minter=minter)


@cli.command(cls=ConnectedProviderCommand, name="update-roles")
@account_option()
@network_option()
@contract_option
@click.option(
    "--role",
    "-r",
    help=f"Role to update ({' | '.join(ROLE_METHODS)})",
    type=str,
    required=True,
)
@click.option(
    "--address",
    "-a",
    help="New address to assign",
    type=ChecksumAddress(label="role"),
    required=True,
)
@autosign_option
def update_roles(account, network, contract, role, address, autosign):
    """Update single-role assignments (pauser, blocklister, rescuer, allowlister, minterAdmin, owner)"""
    transactor = Transactor(account=account, autosign=autosign)
    token = tasks.get_token(contract=contract, network_name=network_key(network))
    tasks.update_role(token, transactor, role=role, address=address)


if __name__ == "__main__":
    cli()

#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option

from jpyc_deployment import tasks
from jpyc_deployment.deployer import Transactor
from jpyc_deployment.options import (
    amount_option,
    autosign_option,
    contract_option,
    decimals_option,
    raw_option,
    to_option,
)
from jpyc_deployment.utils import network_key


@click.group()
def cli():
    """JPYC token actions"""


@cli.command(cls=ConnectedProviderCommand)
@account_option()
@network_option()
@contract_option
@to_option
@amount_option
@decimals_option
@raw_option
@autosign_option
def mint(account, network, contract, to, amount, decimals, raw, autosign):
    """Mint JPYC tokens to the specified address"""
    transactor = Transactor(account=account, autosign=autosign)
    token = tasks.get_token(contract=contract, network_name=network_key(network))
    tasks.mint(token, transactor, to=to, amount=amount, decimals=decimals, raw=raw)


@cli.command(cls=ConnectedProviderCommand)
@account_option()
@network_option()
@contract_option
@to_option
@amount_option
@decimals_option
@raw_option
@autosign_option
def transfer(account, network, contract, to, amount, decimals, raw, autosign):
    """Transfer JPYC from the signer to the specified address"""
    transactor = Transactor(account=account, autosign=autosign)
    token = tasks.get_token(contract=contract, network_name=network_key(network))
    tasks.transfer(token, transactor, to=to, amount=amount, decimals=decimals, raw=raw)


@cli.command(cls=ConnectedProviderCommand)
@account_option()
@network_option()
@contract_option
@amount_option
@decimals_option
@raw_option
@autosign_option
def burn(account, network, contract, amount, decimals, raw, autosign):
    """Burn JPYC from the signer's balance"""
    transactor = Transactor(account=account, autosign=autosign)
    token = tasks.get_token(contract=contract, network_name=network_key(network))
    tasks.burn(token, transactor, amount=amount, decimals=decimals, raw=raw)


if __name__ == "__main__":
    cli()

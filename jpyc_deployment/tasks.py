"""
Token actions and administration.

Every handler resolves the proxy address, binds the token interface to it,
normalizes its inputs and sends exactly one transaction.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional

import click
from ape.api import ReceiptAPI
from ape.contracts import ContractInstance

from jpyc_deployment.constants import (
    BURN_TASK,
    CONFIGURE_MINTER_TASK,
    DEFAULT_DECIMALS,
    MINT_TASK,
    REMOVE_MINTER_TASK,
    ROLE_METHODS,
    TOKEN_CONTRACT,
    TRANSFER_TASK,
    UPDATE_ROLES_TASK,
)
from jpyc_deployment.deployer import Transactor, _txn_hash
from jpyc_deployment.normalize import normalize_address, normalize_allowance, normalize_amount
from jpyc_deployment.registry import resolve_contract_address
from jpyc_deployment.utils import get_token_contract, load_environment


class UnsupportedRole(ValueError):
    """Raised when a role name has no matching update method"""


def get_token(
    contract: Optional[str],
    network_name: str,
    environ: Optional[Mapping[str, str]] = None,
    deployments_dir: Optional[Path] = None,
) -> ContractInstance:
    """Returns the token interface bound at the resolved proxy address."""
    if environ is None:
        load_environment()
        environ = os.environ
    address = resolve_contract_address(
        explicit=contract, network_name=network_name, environ=environ, directory=deployments_dir
    )
    return get_token_contract(address, TOKEN_CONTRACT)


def resolve_role_method(role: str) -> str:
    normalized_role = role.strip().lower()
    try:
        return ROLE_METHODS[normalized_role]
    except KeyError:
        raise UnsupportedRole(
            f"Unsupported role: {role}. Supported roles: {', '.join(ROLE_METHODS)}"
        )


def _send(task: str, transactor: Transactor, method, *args) -> ReceiptAPI:
    receipt = transactor.transact(method, *args)
    click.echo(f"[{task}] tx={_txn_hash(receipt)}")
    return receipt


#
# Actions
#


def mint(
    token: ContractInstance,
    transactor: Transactor,
    to: str,
    amount: Any,
    decimals: int = DEFAULT_DECIMALS,
    raw: bool = False,
) -> ReceiptAPI:
    recipient = normalize_address(to, "recipient")
    value = normalize_amount(amount, decimals, raw)
    click.echo(f"[{MINT_TASK}] minting {value} to {recipient}")
    return _send(MINT_TASK, transactor, token.mint, recipient, value)


def transfer(
    token: ContractInstance,
    transactor: Transactor,
    to: str,
    amount: Any,
    decimals: int = DEFAULT_DECIMALS,
    raw: bool = False,
) -> ReceiptAPI:
    recipient = normalize_address(to, "recipient")
    value = normalize_amount(amount, decimals, raw)
    click.echo(f"[{TRANSFER_TASK}] transferring {value} to {recipient}")
    return _send(TRANSFER_TASK, transactor, token.transfer, recipient, value)


def burn(
    token: ContractInstance,
    transactor: Transactor,
    amount: Any,
    decimals: int = DEFAULT_DECIMALS,
    raw: bool = False,
) -> ReceiptAPI:
    value = normalize_amount(amount, decimals, raw)
    signer = transactor.get_account().address
    click.echo(f"[{BURN_TASK}] burning {value} from signer {signer}")
    return _send(BURN_TASK, transactor, token.burn, value)


#
# Administration
#


def configure_minter(
    token: ContractInstance, transactor: Transactor, minter: str, allowance: Any
) -> ReceiptAPI:
    minter_address = normalize_address(minter, "minter")
    amount = normalize_allowance(allowance)
    click.echo(
        f"[{CONFIGURE_MINTER_TASK}] configuring {minter_address} with allowance {amount}"
    )
    return _send(CONFIGURE_MINTER_TASK, transactor, token.configureMinter, minter_address, amount)


def remove_minter(token: ContractInstance, transactor: Transactor, minter: str) -> ReceiptAPI:
    minter_address = normalize_address(minter, "minter")
    click.echo(f"[{REMOVE_MINTER_TASK}] removing {minter_address}")
    return _send(REMOVE_MINTER_TASK, transactor, token.removeMinter, minter_address)


def update_role(
    token: ContractInstance, transactor: Transactor, role: str, address: str
) -> ReceiptAPI:
    new_address = normalize_address(address, "role")
    method_name = resolve_role_method(role)
    click.echo(f"[{UPDATE_ROLES_TASK}] calling {method_name}({new_address})")
    return _send(UPDATE_ROLES_TASK, transactor, getattr(token, method_name), new_address)

from pathlib import Path

import click

from jpyc_deployment.constants import DEFAULT_DECIMALS
from jpyc_deployment.types import ChecksumAddress, Decimals

contract_option = click.option(
    "--contract",
    "-c",
    help="Proxy contract address (defaults to JPYC_PROXY or deployments)",
    type=str,
    required=False,
    default=None,
)

to_option = click.option(
    "--to",
    "-t",
    help="Recipient address",
    type=ChecksumAddress(label="recipient"),
    required=True,
)

amount_option = click.option(
    "--amount",
    help="Token amount (as decimal unless --raw is provided)",
    type=str,
    required=True,
)

decimals_option = click.option(
    "--decimals",
    help="Token decimals when amount is decimal",
    type=Decimals(),
    default=DEFAULT_DECIMALS,
    show_default=True,
)

raw_option = click.option(
    "--raw",
    help="Treat amount as the smallest unit (do not scale by decimals)",
    is_flag=True,
    default=False,
)

minter_option = click.option(
    "--minter",
    "-m",
    help="Minter address",
    type=ChecksumAddress(label="minter"),
    required=True,
)

autosign_option = click.option(
    "--autosign",
    help="Sign transactions without asking for confirmation",
    is_flag=True,
    default=False,
)

params_option = click.option(
    "--params",
    "-p",
    "params_path",
    help="Path to deployment parameter JSON or YAML file",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    required=False,
    default=None,
)

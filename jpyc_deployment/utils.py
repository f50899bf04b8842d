import json
import os
from pathlib import Path
from typing import Any

import click
import yaml
from ape import chain, networks, project
from ape.api.networks import LOCAL_NETWORK_NAME
from ape.contracts import ContractContainer, ContractInstance
from ape.utils import EMPTY_BYTES32
from dotenv import find_dotenv, load_dotenv
from eth_typing import ChecksumAddress
from eth_utils import to_checksum_address

from jpyc_deployment.constants import (
    EIP1967_IMPLEMENTATION_SLOT,
    OZ_DEPENDENCY_NAME,
    OZ_DEPENDENCY_VERSION,
    PROXY_CONTRACT,
)


def _load_yaml(filepath: Path) -> Any:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def load_json(filepath: Path) -> Any:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def load_config_file(filepath: Path) -> Any:
    """Loads a JSON or YAML file based on its suffix."""
    if filepath.suffix.lower() in (".yml", ".yaml"):
        return _load_yaml(filepath)
    return load_json(filepath)


def load_environment() -> None:
    """Loads a .env file (if any) without overriding variables already set."""
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)


def is_local_network() -> bool:
    network_name = networks.provider.network.name
    return network_name == LOCAL_NETWORK_NAME or network_name.endswith("-fork")


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        import ape_etherscan  # noqa: F401
        from ape_etherscan.utils import ETHERSCAN_API_KEY_NAME
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to verify contracts.")
    if not os.environ.get(ETHERSCAN_API_KEY_NAME):
        raise ValueError(f"{ETHERSCAN_API_KEY_NAME} is not set.")


def check_infura_plugin() -> None:
    """Checks that the ape-infura plugin is installed."""
    if is_local_network():
        return  # unnecessary for local deployment
    if networks.provider.name != "infura":
        return  # unnecessary when using a provider different than infura
    try:
        import ape_infura  # noqa: F401
        from ape_infura.provider import _ENVIRONMENT_VARIABLE_NAMES
    except ImportError:
        raise ImportError("Please install the ape-infura plugin to use this script.")
    for envvar in _ENVIRONMENT_VARIABLE_NAMES:
        if os.environ.get(envvar):
            break
    else:
        raise ValueError(
            f"No Infura API key found in "
            f"environment variables: {', '.join(_ENVIRONMENT_VARIABLE_NAMES)}"
        )


def check_plugins(verify: bool = False) -> None:
    print("Checking plugins...")
    check_infura_plugin()
    if verify:
        check_etherscan_plugin()


def verify_contract(address: ChecksumAddress, prefix: str) -> bool:
    """
    Publishes a contract to the block explorer of the active network.
    Explorer problems are reported but never abort the caller.
    """
    explorer = networks.provider.network.explorer
    if explorer is None:
        click.secho(f"[{prefix}] verification task not available, skipping", fg="yellow")
        return False
    try:
        explorer.publish_contract(address)
    except Exception as e:
        # explorer plugins also surface plain HTTP and connection errors
        click.secho(f"[{prefix}] verification skipped: {e}", fg="yellow")
        return False
    click.echo(f"[{prefix}] implementation verified")
    return True


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        raise ValueError(f"No contract found with name '{contract}'.")
    return contract_container


def get_proxy_container() -> ContractContainer:
    """Returns the ERC1967 proxy container from the OpenZeppelin dependency."""
    dependency = project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]
    return getattr(dependency, PROXY_CONTRACT)


def get_implementation_address(proxy_address: ChecksumAddress) -> ChecksumAddress:
    """Reads the logic contract address stored in the EIP1967 implementation slot."""
    implementation_slot = chain.provider.get_storage(
        address=proxy_address, slot=EIP1967_IMPLEMENTATION_SLOT
    )
    if implementation_slot == EMPTY_BYTES32:
        raise ValueError(
            f"Implementation slot for contract at {proxy_address} is empty. "
            "Are you sure this is an EIP1967-compatible proxy?"
        )
    return to_checksum_address(implementation_slot[-20:])


def get_token_contract(address: ChecksumAddress, contract_name: str) -> ContractInstance:
    return get_contract_container(contract_name).at(address)


def network_key(network=None) -> str:
    """Returns the name deployment records are filed under, e.g. ``base-sepolia``."""
    network = network or networks.provider.network
    return f"{network.ecosystem.name}-{network.name}"

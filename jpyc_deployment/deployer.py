import typing
from pathlib import Path
from typing import Any, Callable, Optional

import click
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from eth_typing import ChecksumAddress
from web3.auto import w3

from jpyc_deployment.confirm import _confirm_parameters, _continue
from jpyc_deployment.constants import (
    DEPLOY_TASK,
    IMPLEMENTATION_V1,
    IMPLEMENTATION_V2,
    INITIALIZER,
    INITIALIZER_V2,
    PROXY_CONTRACT,
)
from jpyc_deployment.params import DeploymentParameters
from jpyc_deployment.registry import DeploymentRecord, persist_deployment, timestamp
from jpyc_deployment.utils import (
    get_contract_container,
    get_implementation_address,
    get_proxy_container,
    network_key,
    verify_contract,
)


class DeploymentError(RuntimeError):
    """Raised when the proxy deployment or upgrade cannot proceed"""


def _validate_method_args(method_abis, args: typing.Sequence[Any]) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        named_args = {}
        for arg, abi_input in zip(args, abi.inputs):
            if not w3.is_encodable(abi_input.type, arg):
                break
            named_args[abi_input.name] = arg
        else:
            return named_args
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _txn_hash(receipt: Optional[ReceiptAPI]) -> Optional[str]:
    if receipt is None:
        return None
    txn_hash = receipt.txn_hash
    if isinstance(txn_hash, bytes):
        return "0x" + txn_hash.hex().removeprefix("0x")
    return str(txn_hash)


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: typing.Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method.abis[0].name}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account)


class TokenDeployer(Transactor):
    """
    Deploys the token behind an ERC1967 (UUPS) proxy, optionally upgrades it
    to the V2 implementation, and keeps the deployment record up to date.
    """

    def __init__(
        self,
        account: typing.Optional[AccountAPI] = None,
        autosign: bool = False,
        network_name: Optional[str] = None,
        deployments_dir: Optional[Path] = None,
        implementation_v1: Optional[ContractContainer] = None,
        implementation_v2: Optional[ContractContainer] = None,
        proxy_container: Optional[ContractContainer] = None,
        implementation_reader: Optional[Callable[[ChecksumAddress], ChecksumAddress]] = None,
    ):
        if account is None:
            account = select_account()
        if account is None:
            raise DeploymentError("No signer available for deployment")
        super().__init__(account, autosign)
        if network_name is None:
            network_name = network_key()
        self.network_name = network_name
        self.deployments_dir = deployments_dir
        self._implementation_v1 = implementation_v1
        self._implementation_v2 = implementation_v2
        self._proxy_container = proxy_container
        self._read_implementation = implementation_reader or get_implementation_address

    @property
    def implementation_v1(self) -> ContractContainer:
        if self._implementation_v1 is None:
            self._implementation_v1 = get_contract_container(IMPLEMENTATION_V1)
        return self._implementation_v1

    @property
    def implementation_v2(self) -> ContractContainer:
        if self._implementation_v2 is None:
            self._implementation_v2 = get_contract_container(IMPLEMENTATION_V2)
        return self._implementation_v2

    @property
    def proxy_container(self) -> ContractContainer:
        if self._proxy_container is None:
            self._proxy_container = get_proxy_container()
        return self._proxy_container

    def _deploy_contract(self, container: ContractContainer, *args) -> ContractInstance:
        return self.get_account().deploy(container, *args)

    def _persist(self, record: DeploymentRecord) -> Path:
        filepath = persist_deployment(self.network_name, record, directory=self.deployments_dir)
        print(f"(i) Deployment record written to {filepath}")
        return filepath

    def _verify(self, address: ChecksumAddress) -> None:
        verify_contract(address, prefix=DEPLOY_TASK)

    def print_deployment_info(self, params: DeploymentParameters, verify: bool) -> None:
        print(
            f"Account: {self.get_account().address}",
            f"Network: {self.network_name}",
            f"Token: {params.name} ({params.symbol})",
            f"Verify: {verify}",
            sep="\n",
        )

    def deploy(
        self, params: DeploymentParameters, verify: bool = False, v1only: bool = False
    ) -> DeploymentRecord:
        account = self.get_account()

        if not self._autosign:
            _confirm_parameters(params.values, contract_name=PROXY_CONTRACT)

        click.echo(f"[{DEPLOY_TASK}] deploying with deployer {account.address}")

        implementation = self._deploy_contract(self.implementation_v1)
        initializer = getattr(implementation, INITIALIZER)
        init_data = initializer.encode_input(*params.initializer_args())
        proxy = self._deploy_contract(self.proxy_container, implementation.address, init_data)

        proxy_address = proxy.address
        implementation_address = self._read_implementation(proxy_address)
        click.echo(f"[{DEPLOY_TASK}] proxy={proxy_address} implementation={implementation_address}")

        record = DeploymentRecord(
            network=self.network_name,
            deployed_at=timestamp(),
            deployer=account.address,
            tx_hash=_txn_hash(proxy.receipt),
            proxy=proxy_address,
            implementation=implementation_address,
            params=params.to_dict(),
        )
        self._persist(record)

        if verify:
            self._verify(implementation_address)

        if not v1only:
            record = self.upgrade_to_v2(proxy_address=proxy_address, record=record, verify=verify)

        return record

    def upgrade_to_v2(
        self, proxy_address: ChecksumAddress, record: DeploymentRecord, verify: bool = False
    ) -> DeploymentRecord:
        click.echo(f"[{DEPLOY_TASK}] upgrading proxy to {IMPLEMENTATION_V2}")
        implementation = self._deploy_contract(self.implementation_v2)
        init_data = getattr(implementation, INITIALIZER_V2).encode_input()

        # UUPS: the upgrade entrypoint lives on the current implementation
        proxy = self.implementation_v1.at(proxy_address)
        receipt = self.transact(proxy.upgradeToAndCall, implementation.address, init_data)

        upgrade_tx_hash = _txn_hash(receipt)
        if upgrade_tx_hash:
            click.echo(f"[{DEPLOY_TASK}] upgraded implementation tx={upgrade_tx_hash}")
        else:
            click.echo(f"[{DEPLOY_TASK}] upgrade transaction pending or unavailable")

        new_implementation = self._read_implementation(proxy_address)
        click.echo(
            f"[{DEPLOY_TASK}] now running {IMPLEMENTATION_V2} implementation={new_implementation}"
        )
        record = record._replace(
            upgrade_tx_hash=upgrade_tx_hash or record.upgrade_tx_hash,
            implementation_v2=new_implementation,
            upgraded_at=timestamp(),
        )

        if verify:
            self._verify(new_implementation)

        self._persist(record)
        return record

import itertools
from typing import Any, List, NamedTuple

import pytest
from eth_utils import to_checksum_address

from jpyc_deployment.params import DeploymentParameters

# Common constants
RECIPIENT = "0x70997970c51812dc3a010c7d01b50e0d17dc79c8"
MINTER = "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc"
SIGNER = to_checksum_address("0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266")
# RECIPIENT with a broken EIP-55 checksum
BAD_CHECKSUM = "0x70997970C51812DC3A010C7D01B50E0D17DC79c8"

ROLE_ADDRESSES = {
    "minterAdmin": "0x70997970c51812dc3a010c7d01b50e0d17dc79c8",
    "pauser": "0x3c44cdddb6a900fa2b585dd299e03d12fa4293bc",
    "blocklister": "0x90f79bf6eb2c4f870365e785982e1f101e93b906",
    "rescuer": "0x15d34aaf54267db7d7c367839aaf71a00a2c6a65",
    "owner": "0x976ea74026e726554db657fa54763abd0c3a0aa9",
}

TOKEN_METHODS = {
    "mint": [("_to", "address"), ("_amount", "uint256")],
    "transfer": [("to", "address"), ("value", "uint256")],
    "burn": [("_amount", "uint256")],
    "configureMinter": [("minter", "address"), ("minterAllowedAmount", "uint256")],
    "removeMinter": [("minter", "address")],
    "updatePauser": [("_newPauser", "address")],
    "updateBlocklister": [("_newBlocklister", "address")],
    "updateRescuer": [("newRescuer", "address")],
    "updateAllowlister": [("_newAllowlister", "address")],
    "updateMinterAdmin": [("_newMinterAdmin", "address")],
    "transferOwnership": [("newOwner", "address")],
    "upgradeToAndCall": [("newImplementation", "address"), ("data", "bytes")],
    "initialize": [
        ("tokenName", "string"),
        ("tokenSymbol", "string"),
        ("tokenCurrency", "string"),
        ("tokenDecimals", "uint8"),
        ("newMinterAdmin", "address"),
        ("newPauser", "address"),
        ("newBlocklister", "address"),
        ("newRescuer", "address"),
        ("newOwner", "address"),
    ],
    "initializeV2": [],
}


# Fakes standing in for ape contract containers, instances and accounts
class FakeABIInput(NamedTuple):
    name: str
    type: str


class FakeMethodABI(NamedTuple):
    name: str
    inputs: List[FakeABIInput]


class FakeContractType(NamedTuple):
    name: str


class FakeReceipt(NamedTuple):
    txn_hash: str


class FakeChain:
    def __init__(self):
        self._addresses = itertools.count(0x1000)
        self._hashes = itertools.count(1)
        self.implementations = dict()
        self.transactions = list()

    def next_address(self) -> str:
        return to_checksum_address(f"0x{next(self._addresses):040x}")

    def next_receipt(self) -> FakeReceipt:
        return FakeReceipt(txn_hash=f"0x{next(self._hashes):064x}")

    def read_implementation(self, proxy_address: str) -> str:
        return self.implementations[proxy_address]


class FakeMethod:
    def __init__(self, contract: "FakeContract", name: str, inputs):
        self.contract = contract
        self.abis = [FakeMethodABI(name, [FakeABIInput(*i) for i in inputs])]

    @property
    def name(self) -> str:
        return self.abis[0].name

    def encode_input(self, *args) -> bytes:
        return f"{self.name}{args}".encode()

    def __call__(self, *args, sender=None) -> FakeReceipt:
        receipt = self.contract.chain.next_receipt()
        self.contract.chain.transactions.append((self.contract.address, self.name, args, sender))
        if self.name == "upgradeToAndCall":
            self.contract.chain.implementations[self.contract.address] = args[0]
        return receipt


class FakeContract:
    def __init__(self, chain: FakeChain, name: str, address: str, receipt=None):
        self.chain = chain
        self.address = address
        self.contract_type = FakeContractType(name)
        self.receipt = receipt

    def __getattr__(self, item):
        if item in TOKEN_METHODS:
            return FakeMethod(self, item, TOKEN_METHODS[item])
        raise AttributeError(item)


class FakeContainer:
    def __init__(self, chain: FakeChain, name: str):
        self.chain = chain
        self.contract_type = FakeContractType(name)
        self.deployments = list()

    def at(self, address: str) -> FakeContract:
        return FakeContract(self.chain, self.contract_type.name, address)

    def _deploy(self, *args) -> FakeContract:
        instance = FakeContract(
            self.chain,
            self.contract_type.name,
            self.chain.next_address(),
            receipt=self.chain.next_receipt(),
        )
        self.deployments.append((instance, args))
        return instance


class FakeProxyContainer(FakeContainer):
    def _deploy(self, logic: str, data: bytes) -> FakeContract:
        instance = super()._deploy(logic, data)
        self.chain.implementations[instance.address] = logic
        return instance


class FakeAccount:
    def __init__(self, address: str = SIGNER):
        self.address = address
        self.autosign = None

    def set_autosign(self, enabled: bool) -> None:
        self.autosign = enabled

    def deploy(self, container: FakeContainer, *args: Any) -> FakeContract:
        return container._deploy(*args)


# Fixtures
@pytest.fixture
def fake_chain():
    return FakeChain()


@pytest.fixture
def signer():
    return FakeAccount()


@pytest.fixture
def token(fake_chain):
    return FakeContract(fake_chain, "FiatTokenV2", fake_chain.next_address())


@pytest.fixture
def deployments_dir(tmp_path):
    return tmp_path / "deployments"


@pytest.fixture
def params_source():
    return {
        "name": " JPY Coin ",
        "symbol": "JPYC",
        "currency": "JPY",
        "decimals": 18,
        **ROLE_ADDRESSES,
    }


@pytest.fixture
def params(params_source):
    return DeploymentParameters.from_source(params_source, from_file=True)

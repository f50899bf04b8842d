import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, NamedTuple, Optional

from eth_typing import ChecksumAddress

from jpyc_deployment.constants import (
    DEPLOYMENTS_DIR,
    DEPLOYMENTS_DIR_ENV_KEY,
    LATEST_SUFFIX,
    PROXY_ADDRESS_ENV_KEYS,
)
from jpyc_deployment.normalize import InvalidAddress, checksum_address, is_zero_address
from jpyc_deployment.utils import load_json

NetworkName = str

STANDARD_RECORD_JSON_FORMAT = {"indent": 2}

# field name -> key in the JSON record
_RECORD_KEYS = {
    "network": "network",
    "deployed_at": "deployedAt",
    "deployer": "deployer",
    "tx_hash": "txHash",
    "proxy": "proxy",
    "implementation": "implementation",
    "params": "params",
    "upgrade_tx_hash": "upgradeTxHash",
    "implementation_v2": "implementationV2",
    "upgraded_at": "upgradedAt",
}
_OPTIONAL_FIELDS = ("upgrade_tx_hash", "implementation_v2", "upgraded_at")


class ContractAddressNotFound(ValueError):
    """Raised when no proxy address can be determined for the active network"""


class DeploymentRecord(NamedTuple):
    """Represents a single deployment of the token proxy on one network."""

    network: NetworkName
    deployed_at: str
    deployer: ChecksumAddress
    tx_hash: str
    proxy: ChecksumAddress
    implementation: ChecksumAddress
    params: Dict[str, Any]
    upgrade_tx_hash: Optional[str] = None
    implementation_v2: Optional[ChecksumAddress] = None
    upgraded_at: Optional[str] = None
    extra: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data = dict()
        for field, key in _RECORD_KEYS.items():
            value = getattr(self, field)
            if field in _OPTIONAL_FIELDS and value is None:
                continue
            data[key] = value
        extra = self.extra or dict()
        data.update({k: v for k, v in extra.items() if k not in data})
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DeploymentRecord":
        known_keys = set(_RECORD_KEYS.values())
        kwargs = {field: data.get(key) for field, key in _RECORD_KEYS.items()}
        kwargs["params"] = kwargs["params"] or dict()
        kwargs["extra"] = {k: v for k, v in data.items() if k not in known_keys} or None
        return cls(**kwargs)


def timestamp() -> str:
    """Returns the current UTC time as ISO-8601 with millisecond precision."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def deployments_dir(directory: Optional[Path] = None) -> Path:
    if directory is not None:
        return Path(directory)
    return Path(os.environ.get(DEPLOYMENTS_DIR_ENV_KEY, DEPLOYMENTS_DIR))


def latest_filepath(network_name: NetworkName, directory: Optional[Path] = None) -> Path:
    return deployments_dir(directory) / f"{network_name}-{LATEST_SUFFIX}.json"


def history_filepath(
    network_name: NetworkName, deployed_at: str, directory: Optional[Path] = None
) -> Path:
    # colons are not portable in filenames
    stamp = deployed_at.replace(":", "-")
    return deployments_dir(directory) / f"{network_name}-{stamp}.json"


def _write_record(record: DeploymentRecord, filepath: Path) -> None:
    with open(filepath, "w", encoding="utf-8") as file:
        json.dump(record.to_dict(), file, **STANDARD_RECORD_JSON_FORMAT)


def persist_deployment(
    network_name: NetworkName, record: DeploymentRecord, directory: Optional[Path] = None
) -> Path:
    """
    Writes a deployment record twice: once to a timestamped history file and
    once to the per-network latest file used for address resolution.
    """
    outdir = deployments_dir(directory)
    outdir.mkdir(parents=True, exist_ok=True)

    _write_record(record, history_filepath(network_name, record.deployed_at, outdir))

    filepath = latest_filepath(network_name, outdir)
    _write_record(record, filepath)
    return filepath


def read_record(filepath: Path) -> DeploymentRecord:
    return DeploymentRecord.from_dict(load_json(filepath))


def read_latest(
    network_name: NetworkName, directory: Optional[Path] = None
) -> Optional[DeploymentRecord]:
    """Returns the latest deployment record for a network, if any."""
    filepath = latest_filepath(network_name, directory)
    if not filepath.exists():
        return None
    return read_record(filepath)


def list_deployments(
    network_name: NetworkName, directory: Optional[Path] = None
) -> List[DeploymentRecord]:
    """Returns the deployment history of a network, oldest first."""
    outdir = deployments_dir(directory)
    if not outdir.exists():
        return []

    latest = latest_filepath(network_name, outdir)
    records = list()
    for filepath in outdir.glob(f"{network_name}-*.json"):
        if filepath == latest:
            continue
        record = read_record(filepath)
        if record.network != network_name:
            # another network whose name shares this prefix
            continue
        records.append(record)

    records.sort(key=lambda r: r.deployed_at or "")
    return records


def _validate_contract_address(value: Any) -> ChecksumAddress:
    checksummed = checksum_address(value)
    if checksummed is None:
        raise InvalidAddress(f"Invalid contract address: {value}")
    if is_zero_address(checksummed):
        raise InvalidAddress("Contract address must not be the zero address")
    return checksummed


def resolve_contract_address(
    explicit: Optional[str] = None,
    network_name: Optional[NetworkName] = None,
    environ: Optional[Mapping[str, str]] = None,
    directory: Optional[Path] = None,
) -> ChecksumAddress:
    """
    Determines the proxy address to operate on, checking in order: the
    explicit value, the JPYC_PROXY / JPYC_CONTRACT_ADDRESS environment
    variables, and the latest deployment record of the network.
    """
    if explicit:
        return _validate_contract_address(explicit)

    environ = os.environ if environ is None else environ
    for env_key in PROXY_ADDRESS_ENV_KEYS:
        from_env = environ.get(env_key)
        if from_env:
            return _validate_contract_address(from_env)

    if network_name:
        record = read_latest(network_name, directory)
        if record and record.proxy:
            return _validate_contract_address(record.proxy)

    raise ContractAddressNotFound(
        "Unable to determine proxy address. Provide --contract or set JPYC_PROXY."
    )

import os
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from eth_typing import ChecksumAddress

from jpyc_deployment.constants import ENV_KEYS, REQUIRED_FIELDS, ROLE_FIELDS
from jpyc_deployment.normalize import (
    NormalizationError,
    checksum_address,
    is_zero_address,
    normalize_decimals,
)
from jpyc_deployment.utils import load_config_file, load_environment

TEXT_FIELDS = ["name", "symbol", "currency"]


def _is_blank(value: Any) -> bool:
    return value is None or str(value).strip() == ""


def read_params_file(params_path: Union[str, Path]) -> Dict[str, Any]:
    """Reads deployment parameters from a JSON or YAML file relative to the working directory."""
    filepath = Path(os.getcwd(), params_path).resolve()
    config = load_config_file(filepath)
    if not isinstance(config, dict):
        raise DeploymentParameters.Invalid(
            f"Malformed deployment parameters file {filepath}: expected a mapping."
        )
    return config


def read_params_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Collects the deployment parameters that are set in the environment."""
    if environ is None:
        load_environment()
        environ = os.environ
    return {field: environ[env_key] for field, env_key in ENV_KEYS.items() if env_key in environ}


def _validate_role_address(field: str, value: Any) -> ChecksumAddress:
    checksummed = checksum_address(value)
    if checksummed is None:
        raise DeploymentParameters.Invalid(f"Invalid address for {field}: {str(value).strip()}")
    if is_zero_address(checksummed):
        raise DeploymentParameters.Invalid(f"Address for {field} must not be zero")
    return checksummed


class DeploymentParameters:
    """Represents the validated initializer parameters of the token proxy."""

    class Invalid(ValueError):
        """Raised when the deployment parameters are missing or invalid"""

    def __init__(self, values: Mapping[str, Any], extra: Optional[Mapping[str, Any]] = None):
        self.values = OrderedDict((field, values[field]) for field in REQUIRED_FIELDS)
        self.extra = dict(extra or {})

    def __getattr__(self, item):
        try:
            return self.__dict__["values"][item]
        except KeyError:
            raise AttributeError(item)

    def __eq__(self, other):
        if not isinstance(other, DeploymentParameters):
            return NotImplemented
        return self.values == other.values and self.extra == other.extra

    def __repr__(self):
        return f"DeploymentParameters({dict(self.values)})"

    @classmethod
    def from_source(cls, source: Mapping[str, Any], from_file: bool) -> "DeploymentParameters":
        for field in REQUIRED_FIELDS:
            if _is_blank(source.get(field)):
                hint = f'params field "{field}"' if from_file else f"env var {ENV_KEYS[field]}"
                raise cls.Invalid(f"Missing {hint}")

        values = dict()
        try:
            values["decimals"] = normalize_decimals(source["decimals"])
        except NormalizationError as e:
            raise cls.Invalid(str(e))

        for field in ROLE_FIELDS:
            values[field] = _validate_role_address(field, source[field])

        for field in TEXT_FIELDS:
            values[field] = str(source[field]).strip()

        extra = {k: v for k, v in source.items() if k not in REQUIRED_FIELDS}
        return cls(values=values, extra=extra)

    def initializer_args(self) -> List[Any]:
        """Returns the FiatTokenV1.initialize arguments in call order."""
        return list(self.values.values())

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        data.update(self.values)
        return data


def load_params(
    params_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> DeploymentParameters:
    """
    Resolves the deployment parameters from a parameters file when one is
    given, otherwise from the TOKEN_* / JPYC_* environment variables.
    """
    if params_path:
        print(f"Loading deployment parameters from {params_path}...")
        source = read_params_file(params_path)
    else:
        print("Loading deployment parameters from environment...")
        source = read_params_env(environ)
    return DeploymentParameters.from_source(source, from_file=bool(params_path))

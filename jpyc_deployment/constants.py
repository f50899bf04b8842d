from pathlib import Path

#
# Filesystem
#

PROJECT_DIR = Path(__file__).parent.parent
DEPLOYMENTS_DIR = PROJECT_DIR / "deployments"
LATEST_SUFFIX = "latest"

#
# Token
#

DEFAULT_DECIMALS = 18
MIN_DECIMALS = 0
MAX_DECIMALS = 255
MAX_UINT256 = 2**256 - 1

#
# Contracts
#

IMPLEMENTATION_V1 = "FiatTokenV1"
IMPLEMENTATION_V2 = "FiatTokenV2"
TOKEN_CONTRACT = IMPLEMENTATION_V2

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "4.9.3"
PROXY_CONTRACT = "ERC1967Proxy"

INITIALIZER = "initialize"
INITIALIZER_V2 = "initializeV2"

# EIP1967 Implementation slot - https://eips.ethereum.org/EIPS/eip-1967#logic-contract-address
EIP1967_IMPLEMENTATION_SLOT = 0x360894A13BA1A3210667C828492DB98DCA3E2076CC3735A920A3CA505D382BBC

#
# Environment
#

# checked in order
PROXY_ADDRESS_ENV_KEYS = ("JPYC_PROXY", "JPYC_CONTRACT_ADDRESS")
DEPLOYMENTS_DIR_ENV_KEY = "JPYC_DEPLOYMENTS_DIR"

#
# Deployment parameters
#

ROLE_FIELDS = ["minterAdmin", "pauser", "blocklister", "rescuer", "owner"]

REQUIRED_FIELDS = ["name", "symbol", "currency", "decimals", *ROLE_FIELDS]

ENV_KEYS = {
    "name": "TOKEN_NAME",
    "symbol": "TOKEN_SYMBOL",
    "currency": "TOKEN_CURRENCY",
    "decimals": "TOKEN_DECIMALS",
    "minterAdmin": "JPYC_MINTER_ADMIN",
    "pauser": "JPYC_PAUSER",
    "blocklister": "JPYC_BLOCKLISTER",
    "rescuer": "JPYC_RESCUER",
    "owner": "JPYC_OWNER",
}

#
# Roles
#

ROLE_METHODS = {
    "pauser": "updatePauser",
    "blocklister": "updateBlocklister",
    "rescuer": "updateRescuer",
    "allowlister": "updateAllowlister",
    "minteradmin": "updateMinterAdmin",
    "owner": "transferOwnership",
}

#
# Task names
#

DEPLOY_TASK = "deploy:jpycv2"
MINT_TASK = "jpyc:mint"
TRANSFER_TASK = "jpyc:transfer"
BURN_TASK = "jpyc:burn"
CONFIGURE_MINTER_TASK = "jpyc:configure-minter"
REMOVE_MINTER_TASK = "jpyc:remove-minter"
UPDATE_ROLES_TASK = "jpyc:update-roles"

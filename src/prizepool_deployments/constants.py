"""Configuration constants for prizepool-deployments library."""

# Environment variables holding the secrets remote networks require
INFURA_API_KEY_ENV = "INFURA_API_KEY"
MNEMONIC_ENV = "HDWALLET_MNEMONIC"

# Optional overrides
DERIVATION_PATH_ENV = "HDWALLET_PATH"
MULTISIG_ADDRESS_ENV = "MULTISIG_ADDRESS"
LOCAL_RPC_URL_ENV = "LOCAL_RPC_URL"
BLOCK_GAS_LIMIT_ENV = "BLOCK_GAS_LIMIT"
UNLIMITED_CONTRACT_SIZE_ENV = "ALLOW_UNLIMITED_CONTRACT_SIZE"

DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0"
DEFAULT_LOCAL_RPC_URL = "http://127.0.0.1:8545"
LOCAL_BLOCK_GAS_LIMIT = 200_000_000

# Public networks reached through Infura; records are persisted for these
PUBLIC_NETWORKS = {
    "kovan": {
        "rpc_url_template": "https://kovan.infura.io/v3/{api_key}",
    },
    "ropsten": {
        "rpc_url_template": "https://ropsten.infura.io/v3/{api_key}",
    },
    "rinkeby": {
        "rpc_url_template": "https://rinkeby.infura.io/v3/{api_key}",
    },
    "mainnet": {
        "rpc_url_template": "https://mainnet.infura.io/v3/{api_key}",
    },
}

# Local/fork networks; ephemeral, records are never persisted
LOCAL_NETWORKS = {
    "fork": {
        "engineering_overrides": False,
    },
    "localhost": {
        "engineering_overrides": True,
    },
}

# Role name -> derivation index
NAMED_ACCOUNTS = {
    "deployer": 0,
}
MULTISIG_ROLE = "multisig"

# EIP-3860 limit on contract creation code
MAX_INITCODE_SIZE = 49_152

RPC_TIMEOUT = 30
RECEIPT_POLL_INTERVAL = 1.0
RECEIPT_TIMEOUT = 300.0

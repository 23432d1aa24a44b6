"""Network profile resolution for prizepool-deployments library."""

import logging
import warnings
from typing import Dict, Mapping, Optional

from .constants import (
    BLOCK_GAS_LIMIT_ENV,
    DEFAULT_DERIVATION_PATH,
    DEFAULT_LOCAL_RPC_URL,
    DERIVATION_PATH_ENV,
    INFURA_API_KEY_ENV,
    LOCAL_BLOCK_GAS_LIMIT,
    LOCAL_NETWORKS,
    LOCAL_RPC_URL_ENV,
    MNEMONIC_ENV,
    MULTISIG_ADDRESS_ENV,
    PUBLIC_NETWORKS,
    UNLIMITED_CONTRACT_SIZE_ENV,
)
from .exceptions import InvalidProfileError, MissingCredentialsWarning, NetworkNotFoundError
from .types import MnemonicAccounts, NetworkProfile, NodeAccounts

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get(env: Mapping[str, str], key: str) -> Optional[str]:
    """Return a stripped value, treating blank strings as absent."""
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    value = _get(env, key)
    if value is None:
        return default
    try:
        return int(value, 0)
    except ValueError:
        raise InvalidProfileError(f"${key} must be an integer, got {value!r}") from None


def _parse_flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    value = _get(env, key)
    if value is None:
        return default
    if value.lower() in _TRUE_VALUES:
        return True
    if value.lower() in _FALSE_VALUES:
        return False
    raise InvalidProfileError(f"${key} must be a boolean flag, got {value!r}")


def _local_profiles(env: Mapping[str, str]) -> Dict[str, NetworkProfile]:
    rpc_url = _get(env, LOCAL_RPC_URL_ENV) or DEFAULT_LOCAL_RPC_URL
    block_gas_limit = _parse_int(env, BLOCK_GAS_LIMIT_ENV, LOCAL_BLOCK_GAS_LIMIT)
    unlimited_size = _parse_flag(env, UNLIMITED_CONTRACT_SIZE_ENV, True)

    profiles: Dict[str, NetworkProfile] = {}
    for name, config in LOCAL_NETWORKS.items():
        overrides = config["engineering_overrides"]
        profiles[name] = NetworkProfile(
            name=name,
            rpc_endpoint=rpc_url,
            account_source=NodeAccounts(),
            persist_records=False,
            block_gas_limit=block_gas_limit if overrides else None,
            allow_unlimited_contract_size=unlimited_size if overrides else False,
            multisig_address=_get(env, MULTISIG_ADDRESS_ENV),
        )
    return profiles


def resolve_networks(env: Mapping[str, str]) -> Dict[str, NetworkProfile]:
    """
    Assemble the deployment targets available for a configuration environment.

    Pure configuration assembly; no network I/O is performed.

    Args:
        env: Flat mapping of configuration values (normally os.environ)

    Returns:
        Dictionary mapping network name -> NetworkProfile. Local networks
        ("fork", "localhost") are always present; public networks are present
        only when both $INFURA_API_KEY and $HDWALLET_MNEMONIC are set.

    Raises:
        InvalidProfileError: If an override is malformed

    Warns:
        MissingCredentialsWarning: If either remote secret is absent
    """
    profiles = _local_profiles(env)

    api_key = _get(env, INFURA_API_KEY_ENV)
    mnemonic = _get(env, MNEMONIC_ENV)
    if api_key is None or mnemonic is None:
        message = (
            f"No ${INFURA_API_KEY_ENV} or ${MNEMONIC_ENV} available; "
            f"only local networks resolved: {', '.join(profiles)}"
        )
        logger.warning(message)
        warnings.warn(message, MissingCredentialsWarning, stacklevel=2)
        return profiles

    accounts = MnemonicAccounts(
        mnemonic=mnemonic,
        derivation_path=_get(env, DERIVATION_PATH_ENV) or DEFAULT_DERIVATION_PATH,
    )
    for name, config in PUBLIC_NETWORKS.items():
        profiles[name] = NetworkProfile(
            name=name,
            rpc_endpoint=config["rpc_url_template"].format(api_key=api_key),
            account_source=accounts,
            persist_records=True,
            multisig_address=_get(env, MULTISIG_ADDRESS_ENV),
        )

    logger.debug("Resolved networks: %s", ", ".join(profiles))
    return profiles


def select_network(profiles: Mapping[str, NetworkProfile], name: str) -> NetworkProfile:
    """
    Pick one resolved profile by name.

    Raises:
        NetworkNotFoundError: If name was not resolved
    """
    if name not in profiles:
        raise NetworkNotFoundError(
            f"Network '{name}' not available; resolved networks: {', '.join(sorted(profiles))}"
        )
    return profiles[name]

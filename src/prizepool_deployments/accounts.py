"""Named signer handles for prizepool-deployments library."""

from typing import Callable, Dict, List, Optional

from eth_account import Account
from eth_utils import is_address, to_checksum_address

from .constants import MULTISIG_ROLE, NAMED_ACCOUNTS
from .exceptions import AccountNotFoundError, InvalidProfileError
from .rpc import rpc_request
from .types import MnemonicAccounts, NetworkProfile, NodeAccounts, Signer

Account.enable_unaudited_hdwallet_features()


def _add_multisig(signers: Dict[str, Signer], profile: NetworkProfile) -> None:
    if profile.multisig_address is None:
        return
    if not is_address(profile.multisig_address):
        raise InvalidProfileError(
            f"Multisig address {profile.multisig_address!r} on '{profile.name}' is not an address"
        )
    signers[MULTISIG_ROLE] = Signer(
        role=MULTISIG_ROLE, address=to_checksum_address(profile.multisig_address)
    )


class MnemonicAccountProvider:
    """Derives role signers from a mnemonic; keys stay in-process."""

    def signers(self, profile: NetworkProfile) -> Dict[str, Signer]:
        source = profile.account_source
        if not isinstance(source, MnemonicAccounts):
            raise InvalidProfileError(f"Network '{profile.name}' has no mnemonic account source")

        signers: Dict[str, Signer] = {}
        for role, index in NAMED_ACCOUNTS.items():
            account = Account.from_mnemonic(
                source.mnemonic, account_path=f"{source.derivation_path}/{index}"
            )
            signers[role] = Signer(role=role, address=account.address, account=account)
        _add_multisig(signers, profile)
        return signers


class NodeAccountProvider:
    """Maps roles onto the node's unlocked accounts (eth_accounts)."""

    def __init__(self, list_accounts: Optional[Callable[[str], List[str]]] = None):
        self._list_accounts = list_accounts or self._eth_accounts

    @staticmethod
    def _eth_accounts(rpc_url: str) -> List[str]:
        return rpc_request(rpc_url, "eth_accounts", []) or []

    def signers(self, profile: NetworkProfile) -> Dict[str, Signer]:
        if not profile.rpc_endpoint:
            raise InvalidProfileError(f"Network '{profile.name}' has no RPC endpoint")

        addresses = self._list_accounts(profile.rpc_endpoint)
        signers: Dict[str, Signer] = {}
        for role, index in NAMED_ACCOUNTS.items():
            if index >= len(addresses):
                raise AccountNotFoundError(
                    f"Node for '{profile.name}' exposes {len(addresses)} account(s); "
                    f"role '{role}' needs index {index}"
                )
            signers[role] = Signer(role=role, address=to_checksum_address(addresses[index]))
        _add_multisig(signers, profile)
        return signers


class DefaultAccountProvider:
    """Dispatches on the profile's account source."""

    def __init__(
        self,
        mnemonic: Optional[MnemonicAccountProvider] = None,
        node: Optional[NodeAccountProvider] = None,
    ):
        self.mnemonic = mnemonic or MnemonicAccountProvider()
        self.node = node or NodeAccountProvider()

    def signers(self, profile: NetworkProfile) -> Dict[str, Signer]:
        if isinstance(profile.account_source, MnemonicAccounts):
            return self.mnemonic.signers(profile)
        if isinstance(profile.account_source, NodeAccounts):
            return self.node.signers(profile)
        raise InvalidProfileError(f"Network '{profile.name}' has no account source")

"""JSON-RPC chain client for prizepool-deployments library."""

import logging
import time
from typing import Any, Dict, List, Optional, Sequence

import requests
from eth_utils import to_checksum_address, to_hex

from .artifacts import HardhatArtifactSource
from .constants import MAX_INITCODE_SIZE, RECEIPT_POLL_INTERVAL, RECEIPT_TIMEOUT, RPC_TIMEOUT
from .exceptions import ChainClientError
from .types import DeployOptions, DeployResult, Signer

logger = logging.getLogger(__name__)


def rpc_request(rpc_url: str, method: str, params: List[Any], timeout: float = RPC_TIMEOUT) -> Any:
    """
    Make one JSON-RPC 2.0 call.

    Args:
        rpc_url: RPC endpoint URL
        method: JSON-RPC method, e.g. "eth_chainId"
        params: Positional parameters
        timeout: HTTP timeout in seconds

    Returns:
        The "result" member of the response

    Raises:
        ChainClientError: On network errors, HTTP errors, or RPC errors
    """
    try:
        response = requests.post(
            rpc_url,
            json={"jsonrpc": "2.0", "method": method, "params": params, "id": 1},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise ChainClientError(f"Network error during {method}: {e}") from e

    # Check for HTTP errors
    if response.status_code != 200:
        raise ChainClientError(f"{method} failed with HTTP status {response.status_code}")

    try:
        result = response.json()
    except ValueError as e:
        raise ChainClientError(f"{method} returned a non-JSON response") from e
    if not isinstance(result, dict):
        raise ChainClientError(f"{method} returned a malformed response")

    # Check for RPC errors
    if "error" in result:
        raise ChainClientError(f"RPC error in {method}: {result['error']}")

    return result.get("result")


def _quantity(method: str, value: Any) -> int:
    """Parse a hex-encoded JSON-RPC quantity."""
    try:
        return int(value, 16)
    except (TypeError, ValueError) as e:
        raise ChainClientError(f"{method} returned an invalid quantity: {value!r}") from e


class JsonRpcChainClient:
    """Deploys compiled artifacts through a node's JSON-RPC endpoint."""

    def __init__(
        self,
        rpc_url: str,
        artifacts: HardhatArtifactSource,
        poll_interval: float = RECEIPT_POLL_INTERVAL,
        receipt_timeout: float = RECEIPT_TIMEOUT,
    ):
        self.rpc_url = rpc_url
        self.artifacts = artifacts
        self.poll_interval = poll_interval
        self.receipt_timeout = receipt_timeout

    def _call(self, method: str, *params: Any, required: bool = True) -> Any:
        result = rpc_request(self.rpc_url, method, list(params))
        if required and result is None:
            raise ChainClientError(f"{method} returned no result")
        return result

    def _send_from_node(self, data: str, signer: Signer, options: DeployOptions) -> str:
        tx: Dict[str, Any] = {"from": signer.address, "data": data}
        if options.gas_limit is not None:
            tx["gas"] = hex(options.gas_limit)
        return self._call("eth_sendTransaction", tx)

    def _send_signed(self, data: str, signer: Signer, options: DeployOptions) -> str:
        nonce = _quantity(
            "eth_getTransactionCount",
            self._call("eth_getTransactionCount", signer.address, "pending"),
        )
        if options.gas_limit is not None:
            gas = options.gas_limit
        else:
            gas = _quantity(
                "eth_estimateGas",
                self._call("eth_estimateGas", {"from": signer.address, "data": data}),
            )

        tx = {
            "nonce": nonce,
            "gas": gas,
            "gasPrice": _quantity("eth_gasPrice", self._call("eth_gasPrice")),
            "chainId": _quantity("eth_chainId", self._call("eth_chainId")),
            "value": 0,
            "data": data,
        }
        try:
            signed = signer.account.sign_transaction(tx)
        except (TypeError, ValueError) as e:
            raise ChainClientError(f"Cannot sign deployment from {signer.address}: {e}") from e
        return self._call("eth_sendRawTransaction", to_hex(signed.raw_transaction))

    def wait_for_receipt(self, tx_hash: str) -> Dict[str, Any]:
        """
        Poll until a transaction is mined.

        Raises:
            ChainClientError: If no receipt arrives within receipt_timeout
        """
        deadline = time.monotonic() + self.receipt_timeout
        while True:
            receipt: Optional[Dict[str, Any]] = self._call(
                "eth_getTransactionReceipt", tx_hash, required=False
            )
            if receipt is not None:
                if not isinstance(receipt, dict):
                    raise ChainClientError(f"Malformed receipt for {tx_hash}: {receipt!r}")
                return receipt
            if time.monotonic() >= deadline:
                raise ChainClientError(
                    f"Transaction {tx_hash} not mined after {self.receipt_timeout}s"
                )
            time.sleep(self.poll_interval)

    def deploy_contract(
        self,
        bytecode_ref: str,
        args: Sequence[Any],
        signer: Signer,
        options: DeployOptions,
    ) -> DeployResult:
        """
        Deploy a compiled artifact and wait for it to be mined.

        Args:
            bytecode_ref: Compiled artifact name
            args: Resolved constructor arguments
            signer: Account sending the transaction
            options: Gas limit and code-size overrides

        Returns:
            DeployResult with the new contract address

        Raises:
            ArtifactNotFoundError: If the artifact cannot be loaded
            ConstructorArgumentsError: If args do not match the constructor
            ChainClientError: If submission fails or the transaction reverts
        """
        data = self.artifacts.load(bytecode_ref).creation_code(args)

        initcode_size = (len(data) - 2) // 2
        if not options.allow_unlimited_contract_size and initcode_size > MAX_INITCODE_SIZE:
            raise ChainClientError(
                f"{bytecode_ref} creation code is {initcode_size} bytes, "
                f"over the {MAX_INITCODE_SIZE} byte limit"
            )

        if signer.account is None:
            tx_hash = self._send_from_node(data, signer, options)
        else:
            tx_hash = self._send_signed(data, signer, options)
        logger.debug("Sent %s deployment in %s", bytecode_ref, tx_hash)

        receipt = self.wait_for_receipt(tx_hash)
        if _quantity("eth_getTransactionReceipt", receipt.get("status", "0x1")) != 1:
            raise ChainClientError(f"Deployment transaction {tx_hash} reverted")
        if not receipt.get("contractAddress"):
            raise ChainClientError(f"Receipt for {tx_hash} has no contract address")
        try:
            address = to_checksum_address(receipt["contractAddress"])
        except (TypeError, ValueError) as e:
            raise ChainClientError(
                f"Receipt for {tx_hash} has an invalid contract address: {e}"
            ) from e

        block_number = None
        if receipt.get("blockNumber"):
            block_number = _quantity("eth_getTransactionReceipt", receipt["blockNumber"])

        return DeployResult(
            address=address,
            transaction_hash=tx_hash,
            block_number=block_number,
        )

"""Deployment record stores for prizepool-deployments library."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from eth_utils import to_hex

from .exceptions import RecordStoreUnavailableError
from .paths import get_record_path
from .types import DeploymentRecord, DeploymentStatus


class InMemoryRecordStore:
    """Record store that lives for the lifetime of the process."""

    def __init__(self):
        self._records: Dict[Tuple[str, str], DeploymentRecord] = {}

    def get(self, artifact_name: str, network: str) -> Optional[DeploymentRecord]:
        return self._records.get((artifact_name, network))

    def put(self, record: DeploymentRecord) -> None:
        self._records[(record.artifact_name, record.network)] = record

    def __len__(self) -> int:
        return len(self._records)


def _jsonable_arg(value: Any) -> Any:
    # bytes constructor arguments are stored as 0x-prefixed hex
    if isinstance(value, (bytes, bytearray)):
        return to_hex(bytes(value))
    if isinstance(value, (list, tuple)):
        return [_jsonable_arg(item) for item in value]
    return value


def record_to_json(record: DeploymentRecord) -> Dict[str, Any]:
    """
    Serialize a record using hardhat-deploy field names.

    Optional fields are written only when present.
    """
    data: Dict[str, Any] = {
        "address": record.address,
        "status": record.status.value,
    }
    if record.args is not None:
        data["args"] = [_jsonable_arg(arg) for arg in record.args]
    if record.transaction_hash is not None:
        data["transactionHash"] = record.transaction_hash
    if record.block_number is not None:
        data["receipt"] = {"blockNumber": record.block_number}
    if record.error is not None:
        data["error"] = record.error
    return data


def record_from_json(data: Dict[str, Any], artifact_name: str, network: str) -> DeploymentRecord:
    """
    Parse a record file.

    Plain hardhat-deploy files carry no "status"; they describe a successful deployment.
    """
    # Try to get block number from receipt first, fall back to top-level
    block_number = None
    if "receipt" in data and "blockNumber" in data["receipt"]:
        block_number = data["receipt"]["blockNumber"]
    elif "blockNumber" in data:
        block_number = data["blockNumber"]

    return DeploymentRecord(
        artifact_name=artifact_name,
        network=network,
        address=data.get("address"),
        status=DeploymentStatus(data.get("status", DeploymentStatus.DEPLOYED.value)),
        args=data.get("args"),
        transaction_hash=data.get("transactionHash"),
        block_number=block_number,
        error=data.get("error"),
    )


class JsonRecordStore:
    """
    Record store backed by a hardhat-deploy style directory.

    Layout: {root}/{network}/{artifact_name}.json
    """

    def __init__(self, root: Union[Path, str]):
        self.root = Path(root)

    def get(self, artifact_name: str, network: str) -> Optional[DeploymentRecord]:
        """
        Look up the latest record for an artifact.

        Returns:
            DeploymentRecord, or None if the artifact has never been recorded

        Raises:
            RecordStoreUnavailableError: If the file exists but cannot be read or parsed
        """
        record_path = get_record_path(self.root, network, artifact_name)
        try:
            with open(record_path) as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as e:
            raise RecordStoreUnavailableError(
                f"Cannot read deployment record {record_path}: {e}"
            ) from e

        try:
            return record_from_json(data, artifact_name, network)
        except (AttributeError, TypeError, ValueError) as e:
            raise RecordStoreUnavailableError(
                f"Malformed deployment record {record_path}: {e}"
            ) from e

    def put(self, record: DeploymentRecord) -> None:
        """
        Write a record, replacing any previous one for the same key.

        Creates parent directories if they don't exist. The file is written
        to a temporary sibling and renamed into place, so a failed write leaves
        the previous record untouched.

        Raises:
            RecordStoreUnavailableError: If the record cannot be written
        """
        record_path = get_record_path(self.root, record.network, record.artifact_name)
        try:
            payload = json.dumps(record_to_json(record), indent=2)
        except (TypeError, ValueError) as e:
            raise RecordStoreUnavailableError(
                f"Cannot serialize deployment record {record_path}: {e}"
            ) from e

        temp_name = None
        try:
            record_path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", dir=record_path.parent, suffix=".tmp", delete=False
            ) as f:
                temp_name = f.name
                f.write(payload)
            os.replace(temp_name, record_path)
        except OSError as e:
            if temp_name is not None and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise RecordStoreUnavailableError(
                f"Cannot write deployment record {record_path}: {e}"
            ) from e

"""Compiled Hardhat artifact loading for prizepool-deployments library."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import remove_0x_prefix
from eth_utils.abi import collapse_if_tuple

from .exceptions import ArtifactNotFoundError, ConstructorArgumentsError


@dataclass(frozen=True)
class CompiledArtifact:
    """ABI and creation bytecode of one compiled contract."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str  # 0x-prefixed creation bytecode

    def constructor_types(self) -> List[str]:
        """
        Get ABI types of the constructor inputs.

        Returns:
            List of canonical type strings, empty if the contract declares no constructor
        """
        for item in self.abi:
            if item.get("type") == "constructor":
                return [collapse_if_tuple(inp) for inp in item.get("inputs", [])]
        return []

    def creation_code(self, args: Sequence[Any]) -> str:
        """
        Build deployment transaction data: bytecode followed by encoded constructor args.

        Args:
            args: Constructor arguments, already resolved

        Returns:
            0x-prefixed hex string

        Raises:
            ConstructorArgumentsError: If args do not match the constructor signature
        """
        if not self.bytecode or self.bytecode == "0x":
            raise ConstructorArgumentsError(f"Artifact {self.name} has no creation bytecode")
        if "__$" in self.bytecode:
            raise ConstructorArgumentsError(f"Artifact {self.name} has unlinked libraries")

        types = self.constructor_types()
        if len(types) != len(args):
            raise ConstructorArgumentsError(
                f"{self.name} constructor takes {len(types)} argument(s), got {len(args)}"
            )

        try:
            encoded_args = encode(types, list(args))
        except (EncodingError, TypeError, ValueError) as e:
            raise ConstructorArgumentsError(
                f"Cannot encode constructor arguments for {self.name}: {e}"
            ) from e

        return "0x" + remove_0x_prefix(self.bytecode) + encoded_args.hex()


class HardhatArtifactSource:
    """Finds compiled contracts in a Hardhat artifacts directory."""

    def __init__(self, artifacts_dir: Union[Path, str]):
        self.artifacts_dir = Path(artifacts_dir)
        self._cache: Dict[str, CompiledArtifact] = {}

    def _find(self, name: str) -> Path:
        # Hardhat writes artifacts/contracts/<Source>.sol/<Name>.json plus a <Name>.dbg.json
        candidates = sorted(self.artifacts_dir.rglob(f"{name}.json"))
        if not candidates:
            raise ArtifactNotFoundError(
                f"No compiled artifact for {name} under {self.artifacts_dir}"
            )
        return candidates[0]

    def load(self, name: str) -> CompiledArtifact:
        """
        Load a compiled contract by name.

        Raises:
            ArtifactNotFoundError: If no artifact file exists or it is unreadable
        """
        if name in self._cache:
            return self._cache[name]

        artifact_path = self._find(name)
        try:
            with open(artifact_path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ArtifactNotFoundError(f"Unreadable artifact {artifact_path}: {e}") from e

        if "abi" not in data or "bytecode" not in data:
            raise ArtifactNotFoundError(f"Artifact {artifact_path} lacks abi or bytecode")

        artifact = CompiledArtifact(
            name=data.get("contractName", name),
            abi=data["abi"],
            bytecode=data["bytecode"],
        )
        self._cache[name] = artifact
        return artifact

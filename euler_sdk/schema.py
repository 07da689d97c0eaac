"""
ABI-backed interface schemas used to encode calls and decode results.
"""
import hashlib
import json
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from eth_abi import decode as abi_decode, encode as abi_encode
from eth_abi.exceptions import DecodingError as AbiDecodingError, EncodingError as AbiEncodingError
from eth_utils import function_signature_to_4byte_selector, to_bytes
from eth_utils.abi import collapse_if_tuple

from .exceptions import DecodingError, EncodingError

logger = logging.getLogger(__name__)


class AbiEntry(NamedTuple):
    """A function or error entry of an ABI with precomputed types and selector."""
    name: str
    input_types: List[str]
    output_types: List[str]
    selector: bytes
    abi: Dict[str, Any]


def _to_entry(item: Dict[str, Any]) -> AbiEntry:
    input_types = [collapse_if_tuple(p) for p in item.get("inputs", [])]
    output_types = [collapse_if_tuple(p) for p in item.get("outputs", [])]
    signature = f"{item['name']}({','.join(input_types)})"
    return AbiEntry(
        name=item["name"],
        input_types=input_types,
        output_types=output_types,
        selector=function_signature_to_4byte_selector(signature),
        abi=item,
    )


def _normalize_value(param: Dict[str, Any], value: Any) -> Any:
    """Coerce friendly argument forms into what eth_abi expects."""
    type_ = param["type"]
    if type_ == "tuple" and isinstance(value, dict):
        return tuple(_normalize_value(c, value[c["name"]]) for c in param["components"])
    if type_ == "tuple" and isinstance(value, (list, tuple)):
        return tuple(_normalize_value(c, v) for c, v in zip(param["components"], value))
    if type_.startswith("bytes") and not type_.endswith("]") and isinstance(value, str):
        return to_bytes(hexstr=value)
    return value


class InterfaceSchema:
    """
    Encoder/decoder for one contract interface.

    Instances are immutable once built and are shared by every target that
    uses the same interface.
    """

    def __init__(self, abi: Sequence[Dict[str, Any]], name: Optional[str] = None):
        if not isinstance(abi, (list, tuple)):
            raise TypeError("abi must be a list of ABI entries")
        self.abi = list(abi)
        self.name = name
        self.fingerprint = hashlib.sha256(json.dumps(self.abi, sort_keys=True).encode()).hexdigest()
        self._functions: Dict[str, List[AbiEntry]] = {}
        self._errors: Dict[str, AbiEntry] = {}
        for item in self.abi:
            if item.get("type") == "function":
                self._functions.setdefault(item["name"], []).append(_to_entry(item))
            elif item.get("type") == "error":
                self._errors[item["name"]] = _to_entry(item)

    def __repr__(self) -> str:
        return f"InterfaceSchema({self.name or 'anonymous'}, {len(self._functions)} functions)"

    def has_function(self, method: str) -> bool:
        return method in self._functions

    def get_function(self, method: str, arity: Optional[int] = None) -> AbiEntry:
        """
        Find a function entry by name, using arity to pick between overloads.

        Raises:
            EncodingError: If no function matches
        """
        candidates = self._functions.get(method)
        if not candidates:
            raise EncodingError(f"Unknown method '{method}' on {self.name or 'interface'}")
        if arity is not None:
            candidates = [c for c in candidates if len(c.input_types) == arity]
            if not candidates:
                raise EncodingError(
                    f"No overload of '{method}' takes {arity} argument(s)"
                )
        return candidates[0]

    def encode(self, method: str, args: Sequence[Any] = ()) -> bytes:
        """
        Encode a call to ``method`` as selector + ABI-encoded arguments.

        Raises:
            EncodingError: If the method is unknown or arguments do not match
        """
        args = list(args)
        candidates = [
            c for c in self._functions.get(method, []) if len(c.input_types) == len(args)
        ]
        if not candidates:
            # Reuse get_function for a precise message
            self.get_function(method, len(args))

        last_error: Optional[Exception] = None
        for entry in candidates:
            try:
                values = [
                    _normalize_value(param, value)
                    for param, value in zip(entry.abi.get("inputs", []), args)
                ]
                return entry.selector + abi_encode(entry.input_types, values)
            except (AbiEncodingError, TypeError, ValueError, KeyError) as e:
                last_error = e
        raise EncodingError(f"Invalid arguments for '{method}': {last_error}") from last_error

    def decode(self, method: str, data: bytes, arity: Optional[int] = None) -> Tuple[Any, ...]:
        """
        Decode the return data of ``method``.

        Raises:
            DecodingError: If the data does not match the method outputs
        """
        try:
            entry = self.get_function(method, arity)
        except EncodingError as e:
            raise DecodingError(str(e)) from e
        try:
            return tuple(abi_decode(entry.output_types, bytes(data)))
        except (AbiDecodingError, ValueError, OverflowError, TypeError) as e:
            raise DecodingError(f"Failed to decode result of '{method}': {e}") from e

    def error_selector(self, name: str) -> bytes:
        """Return the 4-byte selector of a custom error."""
        if name not in self._errors:
            raise DecodingError(f"Unknown error '{name}' on {self.name or 'interface'}")
        return self._errors[name].selector

    def decode_error(self, name: str, data: bytes) -> Tuple[Any, ...]:
        """
        Decode custom error data (selector included) for error ``name``.

        Raises:
            DecodingError: If the selector does not match or the data is malformed
        """
        selector = self.error_selector(name)
        data = bytes(data)
        if data[:4] != selector:
            raise DecodingError(f"Revert data is not a '{name}' error")
        try:
            return tuple(abi_decode(self._errors[name].input_types, data[4:]))
        except (AbiDecodingError, ValueError, OverflowError, TypeError) as e:
            raise DecodingError(f"Failed to decode '{name}' error: {e}") from e


class ContractTarget:
    """A resolved contract: an address bound to an interface schema."""

    __slots__ = ("address", "schema", "name")

    def __init__(self, address: str, schema: InterfaceSchema, name: Optional[str] = None):
        self.address = address
        self.schema = schema
        self.name = name

    def encode(self, method: str, args: Sequence[Any] = ()) -> bytes:
        return self.schema.encode(method, args)

    def decode(self, method: str, data: bytes, arity: Optional[int] = None) -> Tuple[Any, ...]:
        return self.schema.decode(method, data, arity)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ContractTarget):
            return NotImplemented
        return self.address == other.address and self.schema is other.schema

    def __hash__(self) -> int:
        return hash((self.address, id(self.schema)))

    def __repr__(self) -> str:
        return f"ContractTarget({self.name or 'contract'} at {self.address})"

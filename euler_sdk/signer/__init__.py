"""
Signer interfaces for the Euler SDK.
"""
from typing import Any, Dict, List, Protocol


class Signer(Protocol):
    """Protocol for signers able to produce EIP-712 signatures"""
    address: str

    async def sign_typed_data(
        self,
        domain: Dict[str, Any],
        types: Dict[str, List[Dict[str, str]]],
        message: Dict[str, Any],
    ) -> bytes:
        """Sign typed data and return the 65-byte signature"""
        ...


__all__ = ["Signer"]

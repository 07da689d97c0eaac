"""
Exceptions for the Euler SDK.
"""
from typing import Optional


class EulerError(Exception):
    """Base exception for all Euler SDK errors."""
    pass


class InvalidAddressError(EulerError, ValueError):
    """Raised when an address is empty or not a 20-byte hex address."""
    pass


class UnknownContractError(EulerError):
    """Raised when a contract reference cannot be resolved to a target."""
    pass


class NoTokenForUnderlyingError(EulerError):
    """Raised when the markets module has no token for an underlying asset."""

    def __init__(self, underlying: str, kind: str):
        self.underlying = underlying
        self.kind = kind
        super().__init__(f"No {kind} found for underlying {underlying}")


class EncodingError(EulerError):
    """Raised when a method call cannot be encoded against an interface."""
    pass


class DecodingError(EulerError):
    """Raised when return or revert data cannot be decoded."""
    pass


class LengthMismatchError(EulerError):
    """Raised when batch items and responses have different lengths."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected {expected} batch responses, got {actual}")


class MissingPermitConfigError(EulerError):
    """Raised when a token does not declare a permit configuration."""
    pass


class UnsupportedPermitStandardError(EulerError):
    """Raised for a permit type the SDK cannot sign."""
    pass


class TransportError(EulerError):
    """Raised for failures in the underlying RPC transport."""
    pass


class ContractRevertError(TransportError):
    """Raised when a call or gas estimate reverts on-chain."""

    def __init__(self, message: str, reason: Optional[str] = None, data: bytes = b""):
        self.reason = reason
        self.data = data
        super().__init__(message)


class LiquidityCheckError(EulerError):
    """
    Raised (or reported) when a batch would violate a liquidity check.

    Attributes:
        reason: The known liquidity violation found in the revert reason
        original: The transport error that carried the revert
    """

    def __init__(self, reason: str, original: Optional[BaseException] = None):
        self.reason = reason
        self.original = original
        super().__init__(f"Liquidity check failed: {reason}")

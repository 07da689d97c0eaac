"""
Resolution of logical contract references to callable targets.
"""
import logging
import threading
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .exceptions import NoTokenForUnderlyingError, TransportError, UnknownContractError
from .models import ContractLike, ContractRef, TokenKind
from .schema import ContractTarget, InterfaceSchema
from .transport import Transport
from .utils import ZERO_ADDRESS, validate_address

logger = logging.getLogger(__name__)

UNDERLYING_LOOKUPS = {
    TokenKind.ETOKEN: "underlyingToEToken",
    TokenKind.DTOKEN: "underlyingToDToken",
    TokenKind.PTOKEN: "underlyingToPToken",
}

TOKEN_KINDS = {kind.value for kind in TokenKind}


class ContractCache:
    """
    Process-scoped cache of resolved targets and underlying translations.

    Targets are keyed by role, address and ABI fingerprint, so replacing an
    ABI yields a new target. Entries are written once and never invalidated.
    A concurrent miss can cause a redundant lookup but never an inconsistent
    read, since the first stored value wins.
    """

    def __init__(self):
        self._targets: Dict[Tuple[str, str, str], ContractTarget] = {}
        self._token_addresses: Dict[Tuple[str, str], str] = {}
        self._lock = threading.RLock()

    def get_target(self, name: str, address: str, schema: InterfaceSchema) -> Optional[ContractTarget]:
        return self._targets.get((name, address, schema.fingerprint))

    def add_target(self, target: ContractTarget) -> ContractTarget:
        with self._lock:
            return self._targets.setdefault((target.name, target.address, target.schema.fingerprint), target)

    def get_token_address(self, underlying: str, kind: str) -> Optional[str]:
        return self._token_addresses.get((underlying, kind))

    def add_token_address(self, underlying: str, kind: str, address: str) -> str:
        with self._lock:
            return self._token_addresses.setdefault((underlying, kind), address)

    def __len__(self) -> int:
        return len(self._targets)


class ContractResolver:
    """
    Maps contract references to (address, interface schema) targets.

    Args:
        addresses: Singleton name -> address table for the network
        abis: Contract name -> ABI table (singletons and token kinds)
        transport: Transport used for underlying -> token lookups
        cache: Optional shared cache; a fresh one is created otherwise
    """

    def __init__(
        self,
        addresses: Mapping[str, str],
        abis: Mapping[str, List[Dict[str, Any]]],
        transport: Optional[Transport] = None,
        cache: Optional[ContractCache] = None,
    ):
        self.transport = transport
        self.cache = cache if cache is not None else ContractCache()
        self.addresses: Dict[str, str] = {}
        self.schemas: Dict[str, InterfaceSchema] = {}
        for name, abi in abis.items():
            self.schemas[name] = InterfaceSchema(abi, name=name)
        for name, address in addresses.items():
            self.addresses[name] = validate_address(address)

    def register(self, name: str, abi: List[Dict[str, Any]], address: Optional[str] = None) -> None:
        """Register (or replace) a named interface and, for singletons, its address."""
        self.schemas[name] = InterfaceSchema(abi, name=name)
        if address is not None:
            self.addresses[name] = validate_address(address)

    def singleton(self, name: str) -> ContractTarget:
        """
        Resolve a singleton module synchronously.

        Raises:
            UnknownContractError: If the name is not a registered singleton
        """
        if name not in self.addresses or name not in self.schemas:
            raise UnknownContractError(f"Unknown contract {name}")
        return self._target(name, self.addresses[name])

    def token(self, kind: Union[TokenKind, str], address: str) -> ContractTarget:
        """Resolve a token role bound to a token address."""
        kind = TokenKind(kind).value
        return self._target(kind, validate_address(address))

    async def resolve(self, ref: ContractLike, address: Optional[str] = None) -> ContractTarget:
        """
        Resolve a reference to a target.

        Args:
            ref: Singleton name, ContractRef or an already resolved target
            address: Token address shorthand for token roles given by name

        Returns:
            ContractTarget for the reference

        Raises:
            UnknownContractError: If the reference names nothing known
            InvalidAddressError: If an address is malformed
            NoTokenForUnderlyingError: If the underlying has no token of that kind
        """
        if isinstance(ref, ContractTarget):
            return ref
        if isinstance(ref, str):
            ref = ContractRef(name=ref, address=address)
        if not isinstance(ref, ContractRef):
            raise UnknownContractError(f"Unknown contract {ref!r}")

        if ref.underlying is not None:
            if ref.name not in TOKEN_KINDS:
                raise UnknownContractError(f"Contract {ref.name} is not a token role")
            token_address = await self.token_for_underlying(ref.name, ref.underlying)
            return self._target(ref.name, token_address)

        if ref.address is not None:
            return self._target(ref.name, validate_address(ref.address))

        if ref.name in TOKEN_KINDS:
            raise UnknownContractError(f"Token contract {ref.name} requires an address")
        return self.singleton(ref.name)

    async def token_for_underlying(self, kind: Union[TokenKind, str], underlying: str) -> str:
        """
        Translate an underlying asset into its token address.

        The first successful lookup per (underlying, kind) is cached for the
        lifetime of the cache.
        """
        kind = TokenKind(kind)
        underlying = validate_address(underlying)
        if kind is TokenKind.ERC20:
            return underlying

        cached = self.cache.get_token_address(underlying, kind.value)
        if cached is not None:
            logger.debug(f"Cache hit for {kind.value} of {underlying}: {cached}")
            return cached

        if self.transport is None:
            raise TransportError("A transport is required to look up tokens by underlying")

        markets = self.singleton("markets")
        method = UNDERLYING_LOOKUPS[kind]
        logger.debug(f"Looking up {kind.value} for underlying {underlying}")
        raw = await self.transport.call(markets.address, markets.encode(method, [underlying]))
        (token_address,) = markets.decode(method, raw)

        if not token_address or int(token_address, 16) == int(ZERO_ADDRESS, 16):
            raise NoTokenForUnderlyingError(underlying, kind.value)

        return self.cache.add_token_address(underlying, kind.value, validate_address(token_address))

    def _target(self, name: str, address: str) -> ContractTarget:
        schema = self.schemas.get(name)
        if schema is None:
            raise UnknownContractError(f"Unknown contract {name}")
        cached = self.cache.get_target(name, address, schema)
        if cached is not None:
            return cached
        return self.cache.add_target(ContractTarget(address, schema, name=name))

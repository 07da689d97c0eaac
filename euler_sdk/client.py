"""
Euler - Main client for the Euler lending protocol.
"""
import logging
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .abis import DEFAULT_ABIS
from .batch import BatchCompiler, BatchDecoder
from .config import NetworkConfig
from .exceptions import TransportError
from .models import (
    BatchItem,
    BatchItemResult,
    BatchResponse,
    ContractLike,
    EulerNetwork,
    SignedPermit,
    Token,
    TokenKind,
    WireDispatchEntry,
)
from .permits import permit_batch_item, sign_permit
from .resolver import ContractCache, ContractResolver
from .schema import ContractTarget
from .signer import Signer
from .simulation import BatchSimulator, SimulationResult
from .transport import Transport, Web3Transport
from .utils import MAX_UINT256, uncapitalize, validate_address

SINGLETON_MODULES = ["Euler", "Exec", "Liquidation", "Markets", "Swap"]

PERMIT_DEADLINE_SECONDS = 60 * 60


def default_permit_deadline() -> int:
    """Unix timestamp one hour from now"""
    return int(time.time()) + PERMIT_DEADLINE_SECONDS


class Euler:
    """
    Client for the Euler protocol.

    This client handles:
    1. Resolving modules and per-asset tokens to callable targets
    2. Compiling, decoding and simulating ``exec`` batches
    3. Signing permits and turning them into batch items

    Sending transactions is left to the caller; ``batch_dispatch_call``
    returns the calldata for a real dispatch.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        chain_id: int = 1,
        network: Optional[Union[EulerNetwork, Dict[str, Any]]] = None,
        signer: Optional[Signer] = None,
        cache: Optional[ContractCache] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the Euler client

        Args:
            transport: Transport used for reads and gas estimates
            chain_id: Chain id; bundled networks are used when ``network`` is omitted
            network: Addresses and reference asset for other chains
            signer: Optional signer for permits
            cache: Optional contract cache shared between clients
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If no addresses are known for the chain
        """
        self.logger = logger or logging.getLogger(__name__)

        if network is None:
            name, config = NetworkConfig.get_network_by_chain_id(chain_id)
            self.logger.info(f"Using bundled '{name}' network configuration")
            network = EulerNetwork.model_validate(config)
        elif isinstance(network, dict):
            network = EulerNetwork.model_validate(network)

        if not network.addresses:
            raise ValueError(f"Missing addresses for chainId {chain_id}")
        if not network.reference_asset:
            raise ValueError(f"Missing reference asset for chainId {chain_id}")

        self.chain_id = network.chain_id
        self.network = network
        self.reference_asset = validate_address(network.reference_asset)
        self.transport = transport

        self.abis: Dict[str, List[Dict[str, Any]]] = dict(DEFAULT_ABIS)
        self.addresses: Dict[str, str] = {}
        self.contracts: Dict[str, ContractTarget] = {}
        self.resolver = ContractResolver({}, self.abis, transport, cache)
        self.compiler = BatchCompiler(self.resolver)
        self.decoder = BatchDecoder(self.resolver)

        for name in SINGLETON_MODULES:
            self.add_contract(name)

        self.eul_token_config: Optional[Token] = None
        if network.eul is not None:
            self.add_contract("Eul", DEFAULT_ABIS["eul"], network.eul.address)
            self.eul_token_config = network.eul

        self._signer: Optional[Signer] = None
        self.connect(signer)

    @classmethod
    def from_network(
        cls,
        network: str,
        rpc_url: Optional[str] = None,
        signer: Optional[Signer] = None,
        **kwargs,
    ) -> "Euler":
        """
        Create a client for a network from the bundled configuration

        Args:
            network: Network name in ``networks.json``
            rpc_url: Optional RPC URL override
            signer: Optional signer for permits
        """
        config = NetworkConfig.get_euler_network(network)
        transport = Web3Transport.from_rpc_url(NetworkConfig.get_rpc_url(network, rpc_url))
        return cls(
            transport=transport,
            chain_id=config.chain_id,
            network=config,
            signer=signer,
            **kwargs,
        )

    def connect(self, signer: Optional[Signer]) -> "Euler":
        """Replace the signing context; resolved targets are kept."""
        self._signer = signer
        return self

    def get_signer(self) -> Optional[Signer]:
        return self._signer

    def add_contract(
        self,
        name: str,
        abi: Optional[List[Dict[str, Any]]] = None,
        address: Optional[str] = None,
    ) -> ContractTarget:
        """
        Register a singleton contract

        Args:
            name: Contract name (first letter is lower-cased)
            abi: ABI to use (defaults to the bundled ABI for the name)
            address: Address to use (defaults to the network address for the name)

        Raises:
            ValueError: If the name is empty or no ABI is known
            InvalidAddressError: If the address is missing or malformed
        """
        if not name:
            raise ValueError("Contract name is required")
        name = uncapitalize(name)

        abi = abi or self.abis.get(name)
        if not isinstance(abi, list):
            raise ValueError(f"Missing or invalid abi for {name}")

        address = validate_address(address or self.network.addresses.get(name))
        self.resolver.register(name, abi, address)
        self.abis[name] = abi
        self.addresses[name] = address
        self.contracts[name] = self.resolver.singleton(name)
        return self.contracts[name]

    def erc20(self, address: str) -> ContractTarget:
        return self.resolver.token(TokenKind.ERC20, address)

    def e_token(self, address: str) -> ContractTarget:
        return self.resolver.token(TokenKind.ETOKEN, address)

    def d_token(self, address: str) -> ContractTarget:
        return self.resolver.token(TokenKind.DTOKEN, address)

    def p_token(self, address: str) -> ContractTarget:
        return self.resolver.token(TokenKind.PTOKEN, address)

    async def token_for_underlying(self, kind: Union[TokenKind, str], underlying: str) -> ContractTarget:
        """Resolve the eToken/dToken/pToken of an underlying asset."""
        token_address = await self.resolver.token_for_underlying(kind, underlying)
        return self.resolver.token(kind, token_address)

    async def e_token_for(self, underlying: str) -> ContractTarget:
        return await self.token_for_underlying(TokenKind.ETOKEN, underlying)

    async def d_token_for(self, underlying: str) -> ContractTarget:
        return await self.token_for_underlying(TokenKind.DTOKEN, underlying)

    async def p_token_for(self, underlying: str) -> ContractTarget:
        return await self.token_for_underlying(TokenKind.PTOKEN, underlying)

    async def call(
        self,
        contract: ContractLike,
        method: str,
        args: Sequence[Any] = (),
        address: Optional[str] = None,
    ) -> Tuple[Any, ...]:
        """Execute a read-only call and decode its result."""
        transport = self._require_transport()
        target = await self.resolver.resolve(contract, address)
        raw = await transport.call(target.address, target.encode(method, args), self._sender())
        return target.decode(method, raw, len(args))

    async def build_batch(self, items: Sequence[BatchItem]) -> List[WireDispatchEntry]:
        return await self.compiler.compile(items)

    async def decode_batch(
        self,
        items: Sequence[BatchItem],
        responses: Sequence[Union[BatchResponse, Tuple[bool, bytes]]],
    ) -> List[BatchItemResult]:
        return await self.decoder.decode(items, responses)

    async def batch_dispatch_call(
        self, items: Sequence[BatchItem], deferred_liquidity: Sequence[str] = ()
    ) -> Tuple[str, bytes]:
        """
        Build the ``exec.batchDispatch`` call for a batch.

        Returns:
            Tuple of (exec address, calldata)
        """
        entries = await self.compiler.compile(items)
        deferred = [validate_address(a) for a in deferred_liquidity]
        exec_ = self.contracts["exec"]
        return exec_.address, exec_.encode("batchDispatch", [[e.as_tuple() for e in entries], deferred])

    async def simulate_batch(
        self,
        deferred_liquidity: Sequence[str],
        items: Sequence[BatchItem],
        estimate_gas_items: Optional[Sequence[BatchItem]] = None,
        exclude_static_calls: bool = False,
    ) -> SimulationResult:
        """Simulate a batch and estimate its gas; see BatchSimulator.simulate."""
        simulator = BatchSimulator(
            self.resolver, self.compiler, self.decoder, self._require_transport(), logger=self.logger
        )
        return await simulator.simulate(
            deferred_liquidity,
            items,
            estimate_gas_items,
            exclude_static_calls=exclude_static_calls,
            sender=self._sender(),
        )

    async def sign_permit(
        self,
        token: Union[Token, Dict[str, Any]],
        spender: Optional[str] = None,
        value: int = MAX_UINT256,
        allowed: bool = True,
        deadline: Optional[int] = None,
        signer: Optional[Signer] = None,
    ) -> SignedPermit:
        """
        Sign a permit for ``token``

        Args:
            token: Token list entry with ``extensions.permit``
            spender: Spender (defaults to the euler contract)
            value: Amount (defaults to max uint256)
            allowed: Approval flag for ALLOWED permits
            deadline: Unix timestamp (defaults to one hour from now)
            signer: Signer (defaults to the connected signer)
        """
        return await sign_permit(
            token,
            spender=spender or self.contracts["euler"].address,
            value=value,
            allowed=allowed,
            deadline=deadline if deadline is not None else default_permit_deadline(),
            signer=signer or self._signer,
            transport=self._require_transport(),
        )

    async def sign_permit_batch_item(
        self,
        token: Union[Token, Dict[str, Any]],
        value: int = MAX_UINT256,
        allowed: bool = True,
        deadline: Optional[int] = None,
        allow_error: bool = False,
        signer: Optional[Signer] = None,
    ) -> BatchItem:
        """Sign a permit for the euler contract and return it as an ``exec`` batch item."""
        if deadline is None:
            deadline = default_permit_deadline()
        signed = await self.sign_permit(
            token,
            spender=self.contracts["euler"].address,
            value=value,
            allowed=allowed,
            deadline=deadline,
            signer=signer,
        )
        return permit_batch_item(token, signed, value, deadline, allowed, allow_error)

    def _require_transport(self) -> Transport:
        if self.transport is None:
            raise TransportError("No transport configured")
        return self.transport

    def _sender(self) -> Optional[str]:
        return self._signer.address if self._signer is not None else None

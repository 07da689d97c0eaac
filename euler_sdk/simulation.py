"""
Batch simulation: a reverting dry run decoded into per-item results, run
concurrently with a gas estimate of the real dispatch.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .batch import BatchCompiler, BatchDecoder
from .exceptions import ContractRevertError, DecodingError, LiquidityCheckError
from .models import BatchItem, BatchItemResult, BatchResponse
from .resolver import ContractResolver
from .transport import Transport
from .utils import validate_address

logger = logging.getLogger(__name__)

LIQUIDITY_CHECK_ERRORS = (
    "e/collateral-violation",
    "e/borrow-isolation-violation",
)

SIMULATION_ERROR = "BatchDispatchSimulation"


@dataclass
class SimulationResult:
    """
    Outcome of a batch simulation.

    Each branch records its own failure: ``simulation_error`` for the dry
    run and ``gas_error`` for the estimate. A gas failure caused by a known
    liquidity violation is a LiquidityCheckError.
    """
    simulation: Optional[List[BatchItemResult]] = None
    gas: Optional[int] = None
    simulation_error: Optional[Exception] = None
    gas_error: Optional[Exception] = None

    @property
    def liquidity_check_error(self) -> Optional[str]:
        if isinstance(self.gas_error, LiquidityCheckError):
            return self.gas_error.reason
        return None

    @property
    def error(self) -> Optional[Exception]:
        return self.simulation_error or self.gas_error


def classify_gas_error(error: Exception) -> Exception:
    """Return a LiquidityCheckError for known liquidity violations, else ``error``."""
    reason = getattr(error, "reason", None)
    if isinstance(reason, str):
        for liquidity_check_error in LIQUIDITY_CHECK_ERRORS:
            if liquidity_check_error in reason:
                return LiquidityCheckError(liquidity_check_error, original=error)
    return error


class BatchSimulator:
    """Runs ``batchDispatchSimulate`` and gas estimation for a batch."""

    def __init__(
        self,
        resolver: ContractResolver,
        compiler: BatchCompiler,
        decoder: BatchDecoder,
        transport: Transport,
        logger: Optional[logging.Logger] = None,
    ):
        self.resolver = resolver
        self.compiler = compiler
        self.decoder = decoder
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)

    async def _dispatch_payload(
        self, method: str, items: Sequence[BatchItem], deferred_liquidity: Sequence[str]
    ) -> bytes:
        entries = await self.compiler.compile(items)
        exec_ = self.resolver.singleton("exec")
        return exec_.encode(method, [[e.as_tuple() for e in entries], list(deferred_liquidity)])

    async def dry_run(
        self,
        deferred_liquidity: Sequence[str],
        items: Sequence[BatchItem],
        sender: Optional[str] = None,
    ) -> List[BatchItemResult]:
        """
        Execute ``batchDispatchSimulate`` and decode the embedded trace.

        Raises:
            DecodingError: If the simulation did not revert with a trace
            Exception: Any other revert or transport error, unchanged
        """
        exec_ = self.resolver.singleton("exec")
        payload = await self._dispatch_payload("batchDispatchSimulate", items, deferred_liquidity)
        try:
            await self.transport.call(exec_.address, payload, sender)
        except ContractRevertError as e:
            if bytes(e.data[:4]) != exec_.schema.error_selector(SIMULATION_ERROR):
                raise
            (simulation,) = exec_.schema.decode_error(SIMULATION_ERROR, e.data)
            responses = [BatchResponse(success=s, result=r) for s, r in simulation]
            return await self.decoder.decode(items, responses)
        raise DecodingError("batchDispatchSimulate returned without a simulation trace")

    async def estimate_gas(
        self,
        deferred_liquidity: Sequence[str],
        items: Sequence[BatchItem],
        sender: Optional[str] = None,
    ) -> int:
        exec_ = self.resolver.singleton("exec")
        payload = await self._dispatch_payload("batchDispatch", items, deferred_liquidity)
        return await self.transport.estimate_gas(exec_.address, payload, sender)

    async def simulate(
        self,
        deferred_liquidity: Sequence[str],
        items: Sequence[BatchItem],
        estimate_gas_items: Optional[Sequence[BatchItem]] = None,
        exclude_static_calls: bool = False,
        sender: Optional[str] = None,
    ) -> SimulationResult:
        """
        Simulate a batch and estimate its gas concurrently.

        Args:
            deferred_liquidity: Accounts whose liquidity checks are deferred
            items: Batch items to simulate
            estimate_gas_items: Items to estimate gas for (defaults to ``items``)
            exclude_static_calls: Drop static-call items from the default gas batch
            sender: Optional ``from`` address for both calls

        Returns:
            SimulationResult with the decoded trace, the gas estimate and
            the failure of each branch, if any
        """
        if not isinstance(items, (list, tuple)):
            raise TypeError("Expecting a list of batch items")
        if estimate_gas_items is not None and not isinstance(estimate_gas_items, (list, tuple)):
            raise TypeError("Expecting a list of batch items for gas estimations")
        deferred_liquidity = [validate_address(a) for a in deferred_liquidity]

        if estimate_gas_items is None:
            estimate_gas_items = items
            if exclude_static_calls:
                estimate_gas_items = [i for i in items if not i.is_static_call]

        result = SimulationResult()

        async def run_dry_run() -> None:
            try:
                result.simulation = await self.dry_run(deferred_liquidity, items, sender)
            except Exception as e:
                self.logger.debug(f"Batch simulation failed: {e}")
                result.simulation_error = e

        async def run_estimate() -> None:
            try:
                result.gas = await self.estimate_gas(deferred_liquidity, estimate_gas_items, sender)
            except Exception as e:
                result.gas_error = classify_gas_error(e)
                if isinstance(result.gas_error, LiquidityCheckError):
                    self.logger.warning(f"Gas estimation hit a liquidity check: {result.gas_error.reason}")
                else:
                    self.logger.debug(f"Gas estimation failed: {e}")

        await asyncio.gather(run_dry_run(), run_estimate())
        return result

"""
Batch compilation and result decoding for ``exec.batchDispatch``.

Compilation is a two-stage pipeline: static-call wrappers are first
normalized into plain ``exec.doStaticCall`` items, then every item is
resolved and encoded. Output order always matches input order, which is
what lets responses be paired back with their items.
"""
import logging
from typing import List, Sequence

from .exceptions import DecodingError, LengthMismatchError
from .models import BatchItem, BatchItemError, BatchItemResult, BatchResponse, WireDispatchEntry
from .resolver import ContractResolver
from .utils import decode_revert_reason

logger = logging.getLogger(__name__)

STATIC_CALL_CONTRACT = "exec"
STATIC_CALL_METHOD = "doStaticCall"


def normalize_item(item: BatchItem, inner_address: str, inner_payload: bytes) -> BatchItem:
    """
    Rewrite a static-call wrapper into an ``exec.doStaticCall`` item.

    The rewritten item carries the inner item's ``allow_error`` flag.
    """
    inner = item.static_call
    return BatchItem(
        contract=STATIC_CALL_CONTRACT,
        method=STATIC_CALL_METHOD,
        args=[inner_address, inner_payload],
        allow_error=inner.allow_error,
    )


class BatchCompiler:
    """Compiles batch items into wire dispatch entries."""

    def __init__(self, resolver: ContractResolver):
        self.resolver = resolver

    async def normalize(self, item: BatchItem) -> BatchItem:
        if not item.is_static_call:
            return item
        inner = item.static_call
        target = await self.resolver.resolve(inner.contract, inner.address)
        payload = target.encode(inner.method, inner.args)
        return normalize_item(item, target.address, payload)

    async def compile_item(self, item: BatchItem) -> WireDispatchEntry:
        item = await self.normalize(item)
        target = await self.resolver.resolve(item.contract, item.address)
        return WireDispatchEntry(
            allow_error=bool(item.allow_error),
            proxy_addr=target.address,
            data=target.encode(item.method, item.args),
        )

    async def compile(self, items: Sequence[BatchItem]) -> List[WireDispatchEntry]:
        """
        Compile batch items in order.

        Raises:
            UnknownContractError: If an item's contract cannot be resolved
            EncodingError: If an item's method or arguments do not match
        """
        entries = []
        for item in items:
            entries.append(await self.compile_item(item))
        logger.debug(f"Compiled batch of {len(entries)} item(s)")
        return entries


def _failure(message: str, data: bytes) -> BatchItemResult:
    reason = decode_revert_reason(data)
    return BatchItemResult(
        success=False,
        error=BatchItemError(reason=reason, message=reason or message, data=data),
    )


class BatchDecoder:
    """Decodes batch responses against the items that produced them."""

    def __init__(self, resolver: ContractResolver):
        self.resolver = resolver

    async def decode_item(self, item: BatchItem, response: BatchResponse) -> BatchItemResult:
        item = item.effective
        data = bytes(response.result)
        if not response.success:
            return _failure("Batch item reverted", data)
        try:
            target = await self.resolver.resolve(item.contract, item.address)
            values = target.decode(item.method, data, len(item.args))
        except DecodingError as e:
            return _failure(str(e), data)
        return BatchItemResult(success=True, values=list(values))

    async def decode(
        self, items: Sequence[BatchItem], responses: Sequence[BatchResponse]
    ) -> List[BatchItemResult]:
        """
        Decode every response of a batch.

        Item failures are returned as ``success=False`` results.

        Raises:
            LengthMismatchError: If items and responses differ in length
        """
        if len(items) != len(responses):
            raise LengthMismatchError(len(items), len(responses))
        results = []
        for item, response in zip(items, responses):
            if not isinstance(response, BatchResponse):
                success, result = response
                response = BatchResponse(success=success, result=result)
            results.append(await self.decode_item(item, response))
        return results

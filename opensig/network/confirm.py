# opensig/network/confirm.py
import asyncio
import logging
from typing import Optional

from opensig.core.errors import ConfirmationTimeoutError, TransactionRevertedError
from opensig.core.types import TransactionReceipt
from .client import LedgerClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.0


async def wait_for_confirmation(
    ledger: LedgerClient,
    transaction_hash: str,
    initial_delay: float,
    interval: float = DEFAULT_POLL_INTERVAL,
    timeout: Optional[float] = None,
    cancel: Optional[asyncio.Event] = None,
) -> TransactionReceipt:
    """
    Wait one block time, then poll for the transaction receipt every `interval` seconds.
    Returns the receipt once mined successfully; raises TransactionRevertedError if mined
    but failed. Without `timeout` or `cancel` the wait is unbounded.
    """

    async def _poll() -> TransactionReceipt:
        delay = initial_delay
        while True:
            await _sleep(delay, cancel)
            receipt = await ledger.get_transaction_receipt(transaction_hash)
            if receipt is not None:
                if not receipt.status:
                    raise TransactionRevertedError(receipt)
                logger.debug("transaction %s confirmed in block %s", transaction_hash, receipt.block_number)
                return receipt
            delay = interval

    if timeout is None:
        return await _poll()
    try:
        return await asyncio.wait_for(_poll(), timeout)
    except asyncio.TimeoutError:
        raise ConfirmationTimeoutError(transaction_hash, timeout) from None


async def _sleep(delay: float, cancel: Optional[asyncio.Event]) -> None:
    if cancel is None:
        await asyncio.sleep(delay)
        return
    if cancel.is_set():
        raise asyncio.CancelledError("confirmation wait cancelled")
    try:
        await asyncio.wait_for(cancel.wait(), delay)
    except asyncio.TimeoutError:
        return
    raise asyncio.CancelledError("confirmation wait cancelled")

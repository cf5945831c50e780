"""Cooperative cancellation for the archive loop."""

import asyncio


class CancellationToken:
    """Explicit cancellation signal passed to every suspension point.

    Cancelling raises :class:`asyncio.CancelledError` at the next check, so
    per-episode ``except Exception`` handlers never swallow it.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        >>> token.raise_if_cancelled()
        Traceback (most recent call last):
        asyncio.exceptions.CancelledError: Cancellation requested
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise asyncio.CancelledError("Cancellation requested")

    async def sleep(self, seconds: float) -> None:
        """Sleep for ``seconds`` unless cancelled first.

        Raises:
            asyncio.CancelledError: If cancellation is requested before or
                during the sleep
        """
        self.raise_if_cancelled()
        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(seconds, 0))
        except asyncio.TimeoutError:
            return
        self.raise_if_cancelled()

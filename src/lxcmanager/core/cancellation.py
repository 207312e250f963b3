"""Cancellable suspension for polling loops.

Every wait in the reconciler goes through ``pause()`` so a caller can stop
a poll or convergence loop that it no longer cares about.

Usage:
    token = CancelToken()
    task = asyncio.create_task(reconciler.execute("start", 101, cancel=token))
    token.cancel()  # loop stops at its next wait
"""

import asyncio


class CancelToken:
    """External cancellation signal shared by one or more wait loops."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    async def sleep(self, seconds: float) -> bool:
        """Sleep for ``seconds`` unless cancelled first.

        Returns:
            True if the full interval elapsed, False if cancelled.
        """
        if self.cancelled:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except TimeoutError:
            return True
        return False


async def pause(seconds: float, cancel: CancelToken | None = None) -> bool:
    """Suspend the current task for ``seconds``.

    Returns:
        True if the interval elapsed, False if ``cancel`` fired.
    """
    if cancel is None:
        await asyncio.sleep(seconds)
        return True
    return await cancel.sleep(seconds)

"""Cooperative cancellation for in-flight requests."""

import asyncio
from typing import Any


class AbortError(Exception):
    """Raised when a request is cancelled through an :class:`AbortController`."""

    def __init__(self, reason: Any = None) -> None:
        self.reason = reason
        super().__init__("Request aborted" if reason is None else f"Request aborted: {reason}")


class AbortController:
    """A cancellation handle that can be shared by several requests.

    Calling :meth:`abort` fails every request currently waiting on this
    controller with :class:`AbortError`, and every later request started
    with it fails immediately.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Any = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Any:
        return self._reason

    def abort(self, reason: Any = None) -> None:
        """Signal cancellation.  Only the first call sets the reason."""
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    async def wait(self) -> None:
        """Return once :meth:`abort` has been called."""
        await self._event.wait()

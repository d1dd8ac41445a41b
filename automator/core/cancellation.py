from __future__ import annotations

import signal
import sys
import threading
from typing import Callable, Optional

from automator.core.exceptions import SessionCancelled
from automator.core.logging import get_logger

log = get_logger("cancellation")


class CancellationToken:
    """Shared flag telling input collection and the session loop to stop."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SessionCancelled(self._reason or "cancelled")


def install_signal_handlers(token: CancellationToken) -> Callable[[], None]:
    """
    Route SIGINT/SIGTERM into ``token``.

    The handler also raises ``SessionCancelled`` so a read blocked in
    ``input()`` unwinds immediately instead of waiting for the next line.
    Returns a callable that restores the previous handlers.
    """

    def _handler(sig: int, frame) -> None:
        signal_name = signal.Signals(sig).name
        log.info("shutdown_signal_received", signal=signal_name)
        token.cancel(signal_name)
        raise SessionCancelled(signal_name)

    signals = [signal.SIGINT]
    if sys.platform != "win32":
        signals.append(signal.SIGTERM)

    previous = {sig: signal.signal(sig, _handler) for sig in signals}

    def _restore() -> None:
        for sig, handler in previous.items():
            signal.signal(sig, handler)

    return _restore

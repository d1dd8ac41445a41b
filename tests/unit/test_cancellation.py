import os
import signal
import sys

import pytest

from automator.core.cancellation import CancellationToken, install_signal_handlers
from automator.core.exceptions import SessionCancelled


def test_token_keeps_first_reason():
    token = CancellationToken()
    assert token.cancelled is False
    token.raise_if_cancelled()

    token.cancel("SIGINT")
    token.cancel("SIGTERM")

    assert token.cancelled is True
    assert token.reason == "SIGINT"
    with pytest.raises(SessionCancelled, match="SIGINT"):
        token.raise_if_cancelled()


def test_signal_handler_cancels_token_and_restores_previous():
    previous = signal.getsignal(signal.SIGINT)
    token = CancellationToken()
    restore = install_signal_handlers(token)
    try:
        handler = signal.getsignal(signal.SIGINT)
        with pytest.raises(SessionCancelled):
            handler(signal.SIGINT, None)
        assert token.reason == "SIGINT"
    finally:
        restore()

    assert signal.getsignal(signal.SIGINT) is previous


@pytest.mark.skipif(sys.platform == "win32", reason="SIGTERM delivery is POSIX only")
def test_real_sigterm_unwinds_with_session_cancelled():
    token = CancellationToken()
    restore = install_signal_handlers(token)
    try:
        with pytest.raises(SessionCancelled):
            os.kill(os.getpid(), signal.SIGTERM)
    finally:
        restore()

    assert token.reason == "SIGTERM"

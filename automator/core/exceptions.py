"""Custom exception hierarchy for the automator."""
from __future__ import annotations

from typing import Any, Dict, Optional


class AutomatorError(Exception):
    """Base exception for all automator errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


class EnvironmentSelectionError(AutomatorError):
    """The ENV selector or the configured URLs are not usable."""

    def __init__(
        self,
        message: str,
        selector: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.selector = selector
        if selector:
            self.context["selector"] = selector


class LaunchError(AutomatorError):
    """Opening a new terminal session failed."""

    def __init__(
        self,
        message: str,
        command: Optional[str] = None,
        platform: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.command = command
        self.platform = platform
        if platform:
            self.context["platform"] = platform


class NoCompatibleTerminalError(LaunchError):
    """No known terminal emulator is installed, or every installed one failed to start."""

    def __init__(
        self,
        candidates: Optional[list[str]] = None,
        command: Optional[str] = None,
        platform: Optional[str] = None,
        failures: Optional[Dict[str, str]] = None,
    ):
        failures = dict(failures or {})
        if failures:
            message = "No terminal emulator could be started; failed to spawn " + ", ".join(
                f"{name} ({error})" for name, error in failures.items()
            )
        else:
            message = "No compatible terminal emulator found on this system"
        super().__init__(message, command=command, platform=platform)
        self.candidates = list(candidates or [])
        self.failures = failures


class SessionCancelled(AutomatorError):
    """The session was interrupted by a signal."""

    def __init__(self, reason: str = "interrupted"):
        super().__init__(f"Session cancelled: {reason}")
        self.reason = reason


class PromptAborted(AutomatorError):
    """The input stream closed or the operator aborted a prompt."""
    pass

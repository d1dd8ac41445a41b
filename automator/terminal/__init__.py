"""Terminal launchers for macOS, Windows and Linux desktops."""
from automator.terminal.launcher import launcher_for_platform, open_in_new_tab

__all__ = ["launcher_for_platform", "open_in_new_tab"]

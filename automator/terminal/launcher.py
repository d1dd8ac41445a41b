"""
Open a new interactive terminal session running a shell command.

Each platform gets its own ``TerminalLauncher`` strategy. Strategies never
wait on the child: every process is spawned detached and its handle dropped.
"""
from __future__ import annotations

import shlex
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from automator.core.exceptions import LaunchError, NoCompatibleTerminalError
from automator.core.logging import get_logger
from automator.core.schemas import LaunchCommand, Platform

log = get_logger("terminal")

ArgvBuilder = Callable[[str], List[str]]


class ProcessSpawner:
    """Thin wrapper over PATH lookup and detached ``subprocess.Popen``."""

    def which(self, binary: str) -> bool:
        return shutil.which(binary) is not None

    def spawn(self, argv: Union[str, Sequence[str]], cwd: Optional[Path] = None) -> None:
        """Start ``argv`` detached. A string is passed to Windows untouched."""
        kwargs = {
            "stdin": subprocess.DEVNULL,
            "stdout": subprocess.DEVNULL,
            "stderr": subprocess.DEVNULL,
            "cwd": str(cwd) if cwd else None,
        }
        if sys.platform == "win32":
            kwargs["creationflags"] = (
                subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
            )
        else:
            kwargs["start_new_session"] = True
        subprocess.Popen(argv if isinstance(argv, str) else list(argv), **kwargs)


class TerminalLauncher:
    platform: Platform

    def __init__(self, spawner: Optional[ProcessSpawner] = None) -> None:
        self.spawner = spawner or ProcessSpawner()

    def launch(self, launch: LaunchCommand) -> bool:
        raise NotImplementedError

    def _spawn(
        self,
        terminal: str,
        argv: Union[str, Sequence[str]],
        launch: LaunchCommand,
        cwd: Optional[Path] = None,
    ) -> None:
        try:
            self.spawner.spawn(argv, cwd=cwd)
        except OSError as exc:
            raise LaunchError(
                f"Failed to open new tab: {exc}",
                command=launch.command,
                platform=self.platform.value,
            ) from exc
        log.info("terminal_launched", terminal=terminal, cwd=str(launch.working_dir))


def applescript_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


class MacTerminalLauncher(TerminalLauncher):
    """Runs the command in a new tab of the frontmost Terminal.app window."""

    platform = Platform.MACOS

    def build_script(self, launch: LaunchCommand) -> str:
        shell_line = f"cd {shlex.quote(str(launch.working_dir))} && {launch.command}"
        return (
            'tell application "Terminal"\n'
            f'    tell front window to do script "{applescript_escape(shell_line)}"\n'
            "end tell"
        )

    def launch(self, launch: LaunchCommand) -> bool:
        self._spawn("osascript", ["osascript", "-e", self.build_script(launch)], launch)
        return True


def escape_wt_command(command: str) -> str:
    # wt splits its own command line on ';' into separate sub-commands
    return command.replace(";", "\\;")


class WindowsTerminalLauncher(TerminalLauncher):
    """
    Prefers a new Windows Terminal tab; falls back to a new cmd.exe window.

    The fallback cannot open a tab, so the command ends up in its own console
    window that stays open (``/k``) after the command finishes.
    """

    platform = Platform.WINDOWS

    def launch(self, launch: LaunchCommand) -> bool:
        if self.spawner.which("wt"):
            argv = [
                "wt", "-w", "0", "nt",
                "-d", str(launch.working_dir),
                "powershell", "-NoExit", "-Command", escape_wt_command(launch.command),
            ]
            self._spawn("wt", argv, launch)
        else:
            log.info("windows_terminal_missing", fallback="cmd")
            self._spawn("cmd", cmd_fallback_line(launch.command), launch, cwd=launch.working_dir)
        return True


def cmd_fallback_line(command: str) -> str:
    # cmd.exe ignores backslash escapes, so the command is appended verbatim
    # rather than quoted by list2cmdline; "" is the window title for start
    return f'cmd /c start "" cmd /k {command}'


def unix_candidates(shell: str = "bash") -> Tuple[Tuple[str, ArgvBuilder], ...]:
    """Terminal emulators in preference order: tab-capable, window, minimal."""

    def _login_shell(command: str) -> str:
        return f"{shell} -lc {shlex.quote(command)}"

    return (
        ("gnome-terminal", lambda c: ["--tab", "--", shell, "-lc", c]),
        ("x-terminal-emulator", lambda c: ["-e", _login_shell(c)]),
        ("gnome-terminal", lambda c: ["--", shell, "-lc", c]),
        ("konsole", lambda c: ["-e", shell, "-lc", c]),
        ("xfce4-terminal", lambda c: ["-e", _login_shell(c)]),
        ("xterm", lambda c: ["-e", _login_shell(c)]),
        ("alacritty", lambda c: ["-e", shell, "-lc", c]),
        ("kitty", lambda c: ["-e", shell, "-lc", c]),
    )


class UnixTerminalLauncher(TerminalLauncher):
    """Tries each known emulator in turn and uses the first one installed."""

    platform = Platform.UNIX

    def __init__(
        self,
        spawner: Optional[ProcessSpawner] = None,
        shell: str = "bash",
        candidates: Optional[Sequence[Tuple[str, ArgvBuilder]]] = None,
    ) -> None:
        super().__init__(spawner)
        self.candidates = tuple(candidates) if candidates is not None else unix_candidates(shell)

    def launch(self, launch: LaunchCommand) -> bool:
        probed: List[str] = []
        failures: Dict[str, str] = {}
        for binary, build_args in self.candidates:
            probed.append(binary)
            if not self.spawner.which(binary):
                continue
            argv = [binary, *build_args(launch.command)]
            try:
                self.spawner.spawn(argv, cwd=launch.working_dir)
            except OSError as exc:
                log.warning("terminal_spawn_failed", terminal=binary, error=str(exc))
                failures[binary] = str(exc)
                continue
            log.info("terminal_launched", terminal=binary, cwd=str(launch.working_dir))
            return True
        raise NoCompatibleTerminalError(
            candidates=probed,
            command=launch.command,
            platform=self.platform.value,
            failures=failures,
        )


LAUNCHERS = {
    Platform.MACOS: MacTerminalLauncher,
    Platform.WINDOWS: WindowsTerminalLauncher,
    Platform.UNIX: UnixTerminalLauncher,
}


def launcher_for_platform(
    platform: Optional[Platform] = None,
    spawner: Optional[ProcessSpawner] = None,
    shell: str = "bash",
) -> TerminalLauncher:
    platform = platform or Platform.current()
    if platform is Platform.UNIX:
        return UnixTerminalLauncher(spawner, shell=shell)
    return LAUNCHERS[platform](spawner)


def open_in_new_tab(command: str, cwd: Union[Path, str], platform: Optional[Platform] = None) -> bool:
    """Convenience wrapper: launch ``command`` in ``cwd`` on the current platform."""
    launcher = launcher_for_platform(platform)
    return launcher.launch(LaunchCommand(command=command, working_dir=Path(cwd)))

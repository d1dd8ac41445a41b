"""Interactive menu loop driving the environment store and terminal launcher."""
from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from automator.commands.builder import (
    build_ai_test_command,
    build_codegen_command,
    build_prepare_environment_command,
    detect_package_manager,
)
from automator.core.cancellation import CancellationToken
from automator.core.config import AutomatorConfig
from automator.core.exceptions import LaunchError, PromptAborted, SessionCancelled
from automator.core.logging import get_logger
from automator.core.schemas import (
    CORE_KEYS,
    REQUIRED_KEYS,
    EnvironmentRecord,
    EnvironmentStatus,
    EnvKey,
    LaunchCommand,
    MenuAction,
    MenuChoice,
    TestKind,
)
from automator.runner.prompts import Prompter
from automator.store import env_store
from automator.terminal.launcher import TerminalLauncher

log = get_logger("session")

TEST_LABELS = {
    TestKind.FRONTEND: "Add-Frontend-Test",
    TestKind.API: "Add-Api-Test",
}


def build_menu(status: EnvironmentStatus) -> List[MenuChoice]:
    """Actions offered for ``status``; test actions need an existing ``.env`` file."""
    if status.no_env_file:
        return [
            MenuChoice("🔧 Add Environment Variables", MenuAction.SET_ENV_VARS),
            MenuChoice("❌ Exit", MenuAction.EXIT),
        ]
    env_label = (
        "🔧 Add Environment Variables" if status.needs_setup else "🔧 Update Environment Variables"
    )
    return [
        MenuChoice("🚀 Run Playwright Codegen", MenuAction.RUN_CODEGEN),
        MenuChoice("🧪 Add Frontend Test", MenuAction.ADD_FRONTEND_TEST),
        MenuChoice("🔌 Add API Test", MenuAction.ADD_API_TEST),
        MenuChoice(env_label, MenuAction.SET_ENV_VARS),
        MenuChoice("❌ Exit", MenuAction.EXIT),
    ]


def resolve_selection(raw: str, choices: List[MenuChoice]) -> Optional[MenuAction]:
    """Map a typed number, action id or label onto one of the offered actions."""
    text = raw.strip()
    if text.isdigit():
        index = int(text)
        if 1 <= index <= len(choices):
            return choices[index - 1].action
        return None
    lowered = text.lower()
    for choice in choices:
        if lowered in (choice.action.value, choice.label.lower()):
            return choice.action
    return None


class SessionLoop:
    """
    Single-threaded menu loop.

    Every iteration reloads the ``.env`` file, renders the actions available
    for its status, reads one selection and dispatches it. Launch failures are
    reported with the command to run by hand and never end the session.

    Args:
        project_root: Directory commands run in and the ``.env`` file lives under
        config: Loaded AutomatorConfig
        prompter: Source of operator input
        launcher: Terminal strategy for the current platform
        console: Rich console for output
        token: Cancellation token shared with the signal handlers
    """

    def __init__(
        self,
        project_root: Path,
        config: AutomatorConfig,
        prompter: Prompter,
        launcher: TerminalLauncher,
        console: Optional[Console] = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.project_root = project_root
        self.config = config
        self.prompter = prompter
        self.launcher = launcher
        self.console = console or Console()
        self.token = token or CancellationToken()
        self.env_path = config.env_path(project_root)
        self._handlers: Dict[MenuAction, Callable[[EnvironmentRecord], None]] = {
            MenuAction.RUN_CODEGEN: self.run_codegen,
            MenuAction.ADD_FRONTEND_TEST: lambda record: self.add_test(TestKind.FRONTEND),
            MenuAction.ADD_API_TEST: lambda record: self.add_test(TestKind.API),
            MenuAction.SET_ENV_VARS: self.set_env_vars,
        }

    def run(self) -> int:
        log.info("session_started", env_file=str(self.env_path))
        try:
            while self.step():
                pass
        except SessionCancelled as exc:
            log.info("session_cancelled", reason=exc.reason)
            self.console.print("\n\n👋 Interrupted. Goodbye!")
            return 0
        except PromptAborted:
            log.info("session_input_closed")
            self.console.print("\n👋 Goodbye!")
            return 0
        self.console.print("\n👋 Thanks for using Playwright AI Automator!")
        return 0

    def step(self) -> bool:
        """Run one menu iteration; returns False once the operator chose Exit."""
        self.token.raise_if_cancelled()
        record, status = env_store.load(self.env_path)
        self.render_status(record, status)

        choices = build_menu(status)
        raw = self.prompter.select("What would you like to do?", choices)
        action = resolve_selection(raw, choices)
        if action is None:
            self.console.print("[red]❌ Invalid selection. Please try again.[/red]")
            return True
        if action is MenuAction.EXIT:
            return False

        log.info("action_selected", action=action.value)
        self._handlers[action](record)
        self.console.print()
        return True

    def render_status(self, record: EnvironmentRecord, status: EnvironmentStatus) -> None:
        if status.no_env_file:
            self.console.print(f"[yellow]No environment file at {escape(str(self.env_path))}[/yellow]")
            return

        table = Table(show_header=True, header_style="bold cyan", box=None)
        table.add_column("Variable", style="dim")
        table.add_column("Value", style="bold")
        for key in REQUIRED_KEYS:
            if key.value in status.missing_vars:
                value = "[red]missing[/red]"
            elif record.is_set(key):
                value = escape(record.get(key))
            else:
                value = "[dim]not set[/dim]"
            table.add_row(key.value, value)
        self.console.print(table)

    def run_codegen(self, record: EnvironmentRecord) -> None:
        package_manager = detect_package_manager(self.project_root)
        command = build_codegen_command(package_manager, record.get(EnvKey.BASE_PAGE))
        self.launch(command, "Playwright codegen")

    def add_test(self, kind: TestKind) -> None:
        description = self.collect_description()
        command = build_ai_test_command(kind, description)
        self.launch(command, f"Claude {TEST_LABELS[kind]}")

    def collect_description(self) -> str:
        terminator = self.config.prompt.terminator
        while True:
            lines = self.prompter.read_lines("Enter test description or arguments:", terminator)
            text = " ".join(line.strip() for line in lines if line.strip())
            if text:
                return text
            self.console.print("[red]Please enter a valid argument[/red]")

    def set_env_vars(self, record: EnvironmentRecord) -> None:
        updates: Dict[str, str] = {}
        for key in CORE_KEYS:
            current = record.get(key)
            if current:
                message = f"{key.value}({escape(current)}) (press Enter if current is OK)"
            else:
                message = f"{key.value} (press Enter to skip if not needed)"
            updates[key.value] = self.prompter.ask(message, default=current or None).strip()

        merged = record.merged(updates)
        if merged.is_set(EnvKey.BASE_API):
            documentation = self._ask_required(EnvKey.API_DOCUMENTATION, record.get(EnvKey.API_DOCUMENTATION))
            merged = merged.merged({EnvKey.API_DOCUMENTATION.value: documentation})

        try:
            env_store.save(self.env_path, merged)
        except OSError as exc:
            log.warning("env_file_save_failed", path=str(self.env_path), error=str(exc))
            self.console.print(f"\n[yellow]⚠️  Failed to save environment variables: {escape(str(exc))}[/yellow]")
            return

        set_values = merged.set_values()
        if not set_values:
            self.console.print("\nℹ️ No variables were set (all were skipped).")
            return

        relative = self._display_path(self.env_path)
        self.console.print(f"\n[green]✅ Environment variables have been saved to {escape(relative)} file![/green]")
        self.console.print("The following variables were set:")
        for key, value in set_values:
            self.console.print(f"   {key}={value}", markup=False, highlight=False)

        self.console.print("\n🚀 Automatically setting up testing environment...")
        if self.launch(build_prepare_environment_command(), "Prepare-new-environment setup"):
            self.console.print("💡 This will create a complete testing infrastructure for your environment.")

    def _ask_required(self, key: EnvKey, current: str) -> str:
        while True:
            if current:
                message = f"{key.value}({escape(current)}) (required when BASE_API is set)"
            else:
                message = f"{key.value} (required when BASE_API is set)"
            value = self.prompter.ask(message, default=current or None).strip()
            if value:
                return value
            self.console.print(f"[red]{key.value} is required when BASE_API is set.[/red]")

    def launch(self, command: str, label: str) -> bool:
        """Open ``command`` in a new terminal; on failure print it for manual use."""
        try:
            self.launcher.launch(LaunchCommand(command=command, working_dir=self.project_root))
        except LaunchError as exc:
            log.warning("launch_failed", error=str(exc), command=command)
            self.console.print(f"\n[yellow]⚠️  {escape(exc.message)}[/yellow]")
            self.console.print("Please try running the command manually:")
            self.console.print(f"   {command}", markup=False, highlight=False)
            return False
        self.console.print(f"\n[green]✅ Launched {escape(label)} in a new tab![/green]")
        self.console.print("💡 You can continue using this tool or close it.")
        return True

    def _display_path(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.project_root))
        except ValueError:
            return str(path)

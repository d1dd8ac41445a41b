from __future__ import annotations

import os
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from automator.core.cancellation import CancellationToken, install_signal_handlers
from automator.core.config import AutomatorConfig
from automator.core.exceptions import SessionCancelled
from automator.core.logging import close_log_file, configure_logging, get_logger
from automator.runner.prompts import Prompter
from automator.runner.session import SessionLoop
from automator.terminal.launcher import launcher_for_platform

app = typer.Typer(add_completion=False)
log = get_logger("cli")
console = Console()


def _load_config() -> AutomatorConfig:
    cfg_path = Path(os.getenv("AUTOMATOR_CONFIG", "configs/automator.yaml"))
    return AutomatorConfig.from_yaml(cfg_path)


def _stdin_is_interactive() -> bool:
    return sys.stdin.isatty()


def display_welcome() -> None:
    console.clear()
    console.print(Panel.fit(
        "[bold cyan]🎭 Playwright AI Automator[/bold cyan]\n"
        "[dim]Type the number of an action and press Enter[/dim]",
        border_style="cyan",
        padding=(1, 2),
    ))
    console.print()


def run_session(project_root: Path, cfg: AutomatorConfig, token: CancellationToken) -> int:
    display_welcome()
    prompter = Prompter(console=console, token=token)
    launcher = launcher_for_platform(shell=cfg.terminal.shell)
    session = SessionLoop(
        project_root,
        cfg,
        prompter=prompter,
        launcher=launcher,
        console=console,
        token=token,
    )
    return session.run()


@app.command()
def run() -> None:
    """Start the interactive Playwright automation menu."""
    if not _stdin_is_interactive():
        console.print("[red]❌ This tool requires an interactive terminal environment.[/red]")
        raise typer.Exit(code=1)

    cfg = _load_config()
    log_file = Path(cfg.logging.file) if cfg.logging.file else None
    configure_logging(cfg.logging.level, log_file)

    token = CancellationToken()
    restore_signals = install_signal_handlers(token)
    try:
        exit_code = run_session(Path.cwd(), cfg, token)
    except SessionCancelled:
        console.print("\n\n👋 Interrupted. Goodbye!")
        exit_code = 0
    except Exception as exc:
        log.exception("fatal_error", error=str(exc))
        console.print(f"[red]💥 An unexpected error occurred: {escape(str(exc))}[/red]")
        exit_code = 1
    finally:
        restore_signals()
        close_log_file()
    raise typer.Exit(code=exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()

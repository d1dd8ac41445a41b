"""Shell command construction for the actions offered by the menu."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Union

from automator.core.schemas import PackageManager, TestKind

CODEGEN_PREFIXES = {
    PackageManager.PNPM: "pnpm dlx playwright codegen",
    PackageManager.YARN: "yarn dlx playwright codegen",
    PackageManager.NPM: "npx playwright codegen",
}

# Lockfiles in detection priority order
LOCKFILES = (
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
)

ASSISTANT_BINARY = "claude"
ASSISTANT_FLAGS = "--dangerously-skip-permissions"

TEST_SLASH_COMMANDS = {
    TestKind.FRONTEND: "/Add-Frontend-Test",
    TestKind.API: "/Add-Api-Test",
}

PREPARE_ENVIRONMENT_PROMPT = (
    "/Prepare-new-environment New Environment Setup: Initialize complete testing "
    "infrastructure with validation tests for configured environment variables. "
    "AUTOMATIC DELETION APPROVED - proceed without asking for confirmation."
)

_DOUBLE_QUOTE_SPECIALS = re.compile(r'(["\\$`])')


def detect_package_manager(directory: Path) -> PackageManager:
    for lockfile, manager in LOCKFILES:
        if (directory / lockfile).exists():
            return manager
    return PackageManager.NPM


def build_codegen_command(package_manager: Union[PackageManager, str], base_url: str = "") -> str:
    """Playwright codegen invocation for ``package_manager``, optionally opening ``base_url``."""
    try:
        manager = PackageManager(package_manager)
    except ValueError:
        manager = PackageManager.NPM
    command = CODEGEN_PREFIXES[manager]
    url = (base_url or "").strip()
    if url:
        return f"{command} {url}"
    return command


def escape_double_quoted(text: str) -> str:
    """Escape ``text`` for interpolation inside a POSIX double-quoted string."""
    return _DOUBLE_QUOTE_SPECIALS.sub(r"\\\1", text)


def build_ai_test_command(kind: Union[TestKind, str], argument: str) -> str:
    slash_command = TEST_SLASH_COMMANDS[TestKind(kind)]
    safe_arg = escape_double_quoted(argument)
    return f'{ASSISTANT_BINARY} "{slash_command} {safe_arg}" {ASSISTANT_FLAGS}'


def build_prepare_environment_command() -> str:
    return f'{ASSISTANT_BINARY} "{PREPARE_ENVIRONMENT_PROMPT}" {ASSISTANT_FLAGS}'

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple


class EnvKey(str, Enum):
    """Keys the automation project reads from its ``.env`` file."""

    BASE_PAGE = "BASE_PAGE"
    BASE_API = "BASE_API"
    API_DOCUMENTATION = "API_DOCUMENTATION"


CORE_KEYS: Tuple[EnvKey, ...] = (EnvKey.BASE_PAGE, EnvKey.BASE_API)
REQUIRED_KEYS: Tuple[EnvKey, ...] = (
    EnvKey.BASE_PAGE,
    EnvKey.BASE_API,
    EnvKey.API_DOCUMENTATION,
)
REQUIRED_KEY_NAMES = frozenset(key.value for key in REQUIRED_KEYS)


@dataclass
class EnvironmentRecord:
    """
    Values of the recognised keys as persisted in the ``.env`` file.

    Attributes:
        values: Mapping of key name to raw value. A key with a line in the file
            but nothing after ``=`` maps to an empty string.
    """
    values: Dict[str, str] = field(default_factory=dict)

    def get(self, key: EnvKey | str, default: str = "") -> str:
        return self.values.get(_key_name(key), default)

    def has(self, key: EnvKey | str) -> bool:
        return _key_name(key) in self.values

    def is_set(self, key: EnvKey | str) -> bool:
        return bool(self.get(key).strip())

    def set_values(self) -> List[Tuple[str, str]]:
        """Non-blank values in fixed key order."""
        return [
            (key.value, self.values[key.value])
            for key in REQUIRED_KEYS
            if self.is_set(key)
        ]

    def merged(self, updates: Mapping[str, Optional[str]]) -> "EnvironmentRecord":
        """Return a copy with ``updates`` applied; blank updates keep the prior value."""
        values = dict(self.values)
        for key, value in updates.items():
            if value is not None and value.strip():
                values[_key_name(key)] = value.strip()
        return EnvironmentRecord(values=values)


@dataclass(frozen=True)
class EnvironmentStatus:
    """Derived view of an EnvironmentRecord, recomputed on every menu render."""
    needs_setup: bool
    missing_vars: Tuple[str, ...] = ()
    no_env_file: bool = False


@dataclass(frozen=True)
class LaunchCommand:
    """A shell command and the directory it must run in."""
    command: str
    working_dir: Path


class MenuAction(str, Enum):
    RUN_CODEGEN = "codegen-tab"
    ADD_FRONTEND_TEST = "add-frontend-test"
    ADD_API_TEST = "add-api-test"
    SET_ENV_VARS = "add-env-vars"
    EXIT = "exit"


@dataclass(frozen=True)
class MenuChoice:
    label: str
    action: MenuAction


class PackageManager(str, Enum):
    PNPM = "pnpm"
    YARN = "yarn"
    NPM = "npm"


class TestKind(str, Enum):
    __test__ = False

    FRONTEND = "frontend"
    API = "api"


class Platform(str, Enum):
    MACOS = "darwin"
    WINDOWS = "win32"
    UNIX = "unix"

    @classmethod
    def current(cls, sys_platform: Optional[str] = None) -> "Platform":
        name = sys_platform or sys.platform
        if name == "darwin":
            return cls.MACOS
        if name == "win32":
            return cls.WINDOWS
        return cls.UNIX


def _key_name(key: EnvKey | str) -> str:
    return key.value if isinstance(key, EnvKey) else str(key)

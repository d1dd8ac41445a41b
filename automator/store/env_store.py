"""Read and write the Playwright project's ``.env`` file."""
from __future__ import annotations

import re
from pathlib import Path
from typing import List, Mapping, Optional, Tuple, Union

from automator.core.logging import get_logger
from automator.core.schemas import (
    CORE_KEYS,
    REQUIRED_KEY_NAMES,
    REQUIRED_KEYS,
    EnvironmentRecord,
    EnvironmentStatus,
    EnvKey,
)

log = get_logger("env_store")

ASSIGNMENT_RE = re.compile(r"^([A-Z_]+)=(.*)$")


def load(path: Path) -> Tuple[EnvironmentRecord, EnvironmentStatus]:
    """
    Load the recognised keys from ``path``.

    Never raises: a missing file yields an empty record flagged
    ``no_env_file``; an unreadable one yields an empty record that needs setup.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        log.debug("env_file_missing", path=str(path))
        return EnvironmentRecord(), _empty_status(no_env_file=True)
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("env_file_unreadable", path=str(path), error=str(exc))
        return EnvironmentRecord(), _empty_status(no_env_file=False)

    record = parse(content)
    return record, compute_status(record)


def _empty_status(no_env_file: bool) -> EnvironmentStatus:
    return EnvironmentStatus(
        needs_setup=True,
        missing_vars=tuple(key.value for key in REQUIRED_KEYS),
        no_env_file=no_env_file,
    )


def parse(content: str) -> EnvironmentRecord:
    values = {}
    for line in content.splitlines():
        match = ASSIGNMENT_RE.match(line)
        if match and match.group(1) in REQUIRED_KEY_NAMES:
            values[match.group(1)] = match.group(2)
    return EnvironmentRecord(values=values)


def compute_status(record: EnvironmentRecord, no_env_file: bool = False) -> EnvironmentStatus:
    missing: List[str] = [key.value for key in CORE_KEYS if not record.has(key)]
    if record.is_set(EnvKey.BASE_API) and not record.is_set(EnvKey.API_DOCUMENTATION):
        missing.append(EnvKey.API_DOCUMENTATION.value)
    return EnvironmentStatus(
        needs_setup=bool(missing) or no_env_file,
        missing_vars=tuple(missing),
        no_env_file=no_env_file,
    )


def save(path: Path, values: Union[EnvironmentRecord, Mapping[str, Optional[str]]]) -> Path:
    """
    Merge ``values`` into the file at ``path``.

    Lines for the recognised keys are overwritten (or dropped when the new value
    is blank), keys the caller did not supply keep their last line, every other
    non-blank line is kept verbatim, keys without an existing line are appended,
    and the file ends with a single newline.
    """
    if isinstance(values, EnvironmentRecord):
        values = values.values
    supplied = {}
    for key, value in values.items():
        name = key.value if isinstance(key, EnvKey) else str(key)
        if name in REQUIRED_KEY_NAMES:
            supplied[name] = (value or "").strip()

    path.parent.mkdir(parents=True, exist_ok=True)

    existing_lines: List[str] = []
    if path.exists():
        existing_lines = path.read_text(encoding="utf-8").splitlines()

    # parse() lets the last duplicate win, so an untouched key keeps its last line
    last_line = {}
    for index, line in enumerate(existing_lines):
        match = ASSIGNMENT_RE.match(line)
        if match and match.group(1) in REQUIRED_KEY_NAMES:
            last_line[match.group(1)] = index

    updated: List[str] = []
    processed = set()
    for index, line in enumerate(existing_lines):
        match = ASSIGNMENT_RE.match(line)
        if match and match.group(1) in REQUIRED_KEY_NAMES:
            key = match.group(1)
            if key not in supplied:
                if index == last_line[key]:
                    updated.append(line)
                processed.add(key)
                continue
            if key in processed:
                continue
            processed.add(key)
            value = supplied[key]
            if value:
                updated.append(f"{key}={value}")
        elif line.strip():
            updated.append(line)

    for key in REQUIRED_KEYS:
        value = supplied.get(key.value, "")
        if key.value not in processed and value:
            updated.append(f"{key.value}={value}")

    content = "\n".join(updated) + "\n" if updated else ""
    path.write_text(content, encoding="utf-8")
    log.info("env_file_saved", path=str(path), keys=[k for k, v in supplied.items() if v])
    return path

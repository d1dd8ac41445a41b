"""
Resolve which configured environment a test run targets.

The Playwright project picks its target from the ``ENV`` selector and reads
the URLs from the ``.env`` file; this module applies the same rules so runs
can be checked before anything is started.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import dotenv_values

from automator.core.exceptions import EnvironmentSelectionError
from automator.core.schemas import EnvKey

SELECTOR_VAR = "ENV"
SUPPORTED_ENVIRONMENTS = ("test",)
SELECTOR_GUIDANCE = 'Please provide a correct environment like "ENV=test"'


@dataclass(frozen=True)
class EnvironmentTarget:
    name: str
    base_url: str
    api_url: str
    api_documentation: Optional[str] = None


def resolve_environment(env_file: Path, environ: Optional[Mapping[str, str]] = None) -> EnvironmentTarget:
    """
    Build the target for the selected environment.

    Values already present in ``environ`` (``os.environ`` by default) take
    precedence over the file, matching ``load_dotenv`` without override.
    """
    environ = os.environ if environ is None else environ
    values = {k: v for k, v in dotenv_values(env_file).items() if v is not None} if env_file.exists() else {}
    values.update(environ)

    selector = (values.get(SELECTOR_VAR) or "").strip().lower()
    if selector not in SUPPORTED_ENVIRONMENTS:
        raise EnvironmentSelectionError(SELECTOR_GUIDANCE, selector=selector or None)

    base_url = _require_url(values, EnvKey.BASE_PAGE.value)
    api_url = _require_url(values, EnvKey.BASE_API.value)
    return EnvironmentTarget(
        name=selector,
        base_url=base_url,
        api_url=api_url,
        api_documentation=values.get(EnvKey.API_DOCUMENTATION.value) or None,
    )


def _require_url(values: Mapping[str, str], key: str) -> str:
    url = (values.get(key) or "").strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise EnvironmentSelectionError(
            f"Invalid URL configuration in environment: {key}={url!r}",
            context={"key": key},
        )
    return url

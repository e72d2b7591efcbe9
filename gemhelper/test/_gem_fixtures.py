"""Constants and fake-toolchain helpers shared by tests."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

APP_NAME = "lorem__ipsum"
APP_VERSION = "0.1.0"


def gemspec_json(
    name: str = APP_NAME,
    version: str = APP_VERSION,
    *,
    metadata: dict[str, str] | None = None,
) -> str:
    """What the ruby gemspec loader prints for a gem."""
    return json.dumps(
        {
            "name": name,
            "version": version,
            "homepage": "",
            "metadata": metadata or {},
        }
    )


def fake_gem_build(
    name: str = APP_NAME, version: str = APP_VERSION
) -> Callable[[tuple[str, ...], Path], None]:
    """Side effect of ``gem build``: drop the .gem in the working directory."""

    def effect(command: tuple[str, ...], cwd: Path) -> None:
        del command
        (cwd / f"{name}-{version}.gem").write_bytes(f"gem:{name}-{version}".encode())

    return effect

"""Typed configuration loading.

A project may carry an optional ``.gemhelper.toml`` next to its gemspec:

    tag_prefix = "foo-"
    gem_command = "bundle exec gem"
    push_key = "work"
    remote = "upstream"
    ruby_command = "ruby"

Values from the file sit below CLI options and environment variables; see
``Config.with_overrides``.
"""

from __future__ import annotations

import shlex
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_raw_str, get_str

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "ConfigError",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = ".gemhelper.toml"

DEFAULT_GEM_COMMAND: tuple[str, ...] = ("gem",)
DEFAULT_RUBY_COMMAND: tuple[str, ...] = ("ruby",)


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class Config:
    """Release settings for one gem directory.

    Attributes:
        tag_prefix: Prepended to ``v<version>`` when naming release tags.
        gem_command: argv prefix used instead of ``gem``.
        ruby_command: argv prefix used to evaluate gemspecs.
        push_key: API key name passed to ``gem push --key``.
        remote: git remote to push to (default: branch remote, then origin).
    """

    tag_prefix: str = ""
    gem_command: tuple[str, ...] = DEFAULT_GEM_COMMAND
    ruby_command: tuple[str, ...] = DEFAULT_RUBY_COMMAND
    push_key: str | None = None
    remote: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a parsed TOML mapping."""
        gem_command = get_str(data, "gem_command")
        ruby_command = get_str(data, "ruby_command")
        push_key = get_str(data, "push_key")
        return cls(
            tag_prefix=get_raw_str(data, "tag_prefix") or "",
            gem_command=tuple(shlex.split(gem_command)) if gem_command else DEFAULT_GEM_COMMAND,
            ruby_command=tuple(shlex.split(ruby_command)) if ruby_command else DEFAULT_RUBY_COMMAND,
            push_key=push_key.lower() if push_key else None,
            remote=get_str(data, "remote"),
        )

    def with_overrides(
        self,
        *,
        environ: Mapping[str, str],
        tag_prefix: str | None = None,
        remote: str | None = None,
    ) -> Config:
        """Layer environment variables and CLI options over file values.

        ``GEM_COMMAND`` replaces ``gem_command`` when set and non-blank.
        """
        out = self
        env_gem = environ.get("GEM_COMMAND", "").strip()
        if env_gem:
            out = replace(out, gem_command=tuple(shlex.split(env_gem)))
        if tag_prefix is not None:
            out = replace(out, tag_prefix=tag_prefix)
        if remote:
            out = replace(out, remote=remote)
        return out


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        data_obj: object = tomllib.loads(path.read_bytes().decode("utf-8"))
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError("Config root must be a TOML table", path=path))
    return Ok(data)


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to ``.gemhelper.toml``

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except ValueError as e:
        # shlex.split rejects unbalanced quotes
        return Err(ConfigError(f"Invalid config value: {e}", path=path))


def load_config_or_default(base: Path) -> Result[Config, ConfigError]:
    """Load ``<base>/.gemhelper.toml`` if present, defaults otherwise.

    A present but broken file is still an error.
    """
    path = base / CONFIG_FILE_NAME
    if not path.is_file():
        return Ok(Config())
    return load_config(path)

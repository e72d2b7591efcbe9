"""Gemspec discovery and loading.

A gem directory must contain exactly one ``*.gemspec`` (the hidden
``.gemspec`` counts). Discovery is a plain directory scan that reports
"none" and "multiple" as distinct failure reasons. Loading evaluates the
gemspec with ``ruby`` and reads the fields the helper needs back as JSON.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from gemhelper.core.errors import HelperError
from gemhelper.core.result import Err, Ok, Result
from gemhelper.core.structured import as_str_dict, get_str, get_str_map
from gemhelper.platform.process import CommandRunner

__all__ = [
    "DESCRIPTOR_SUFFIX",
    "DescriptorScanError",
    "PackageDescriptor",
    "load_descriptor",
    "resolve_descriptor",
    "scan_descriptors",
]

DESCRIPTOR_SUFFIX = ".gemspec"

# Prints the fields of the gemspec given as ARGV[0] as one JSON object.
_LOADER_SCRIPT = """\
require "json"
spec = Gem::Specification.load(ARGV.fetch(0))
abort("Invalid gemspec in [#{ARGV[0]}]") unless spec
puts JSON.generate(
  "name" => spec.name,
  "version" => spec.version.to_s,
  "homepage" => spec.homepage,
  "metadata" => spec.metadata
)
"""


@dataclass(frozen=True, slots=True)
class PackageDescriptor:
    """The parts of a gemspec the helper works with.

    Attributes:
        path: The gemspec file
        name: Gem name
        version: Gem version string
        homepage: Homepage URL, if declared
        metadata: ``spec.metadata`` (string values only)
    """

    path: Path
    name: str
    version: str
    homepage: str | None = None
    metadata: Mapping[str, str] = field(default_factory=dict, hash=False)

    @property
    def allowed_push_host(self) -> str | None:
        host = self.metadata.get("allowed_push_host", "").strip()
        return host or None

    @property
    def gem_file_name(self) -> str:
        return f"{self.name}-{self.version}.gem"

    @property
    def constant_name(self) -> str:
        """Ruby constant for the gem name.

        ``-`` opens a nested namespace and ``_`` separates words:
        ``lorem__ipsum-foo_bar`` becomes ``LoremIpsum::FooBar``.
        """
        nested = re.sub(r"-[_-]*(?![_-]|$)", "::", self.name)
        return re.sub(
            r"([_-]+|(::)|^)(.|$)",
            lambda m: (m.group(2) or "") + m.group(3).upper(),
            nested,
        )

    @property
    def module_path(self) -> list[str]:
        """Namespace segments of ``constant_name``, outermost first."""
        return self.constant_name.split("::")


@dataclass(frozen=True, slots=True)
class DescriptorScanError:
    """Why a directory did not yield exactly one gemspec.

    Attributes:
        reason: ``none``, ``multiple``, or ``missing`` (an explicitly named
            gemspec does not exist)
        directory: The scanned directory
        candidates: Matching files, when there were several
    """

    reason: Literal["none", "multiple", "missing"]
    directory: Path
    candidates: tuple[Path, ...] = ()

    @property
    def message(self) -> str:
        return (
            f"Unable to determine name from existing gemspec in {self.directory}. "
            "Use --name to set it explicitly."
        )


def scan_descriptors(
    base: Path | None = None,
    name: str | None = None,
) -> Result[Path, DescriptorScanError]:
    """Find the single gemspec in ``base``.

    Args:
        base: Directory to scan; the current directory when None. Relative
            paths are resolved against the current directory.
        name: Explicit gem name; only ``<base>/<name>.gemspec`` is considered.

    Returns:
        Ok(path) when exactly one gemspec matches, Err otherwise.
    """
    directory = (base or Path.cwd()).expanduser().resolve()

    if name is not None:
        named = directory / f"{name}{DESCRIPTOR_SUFFIX}"
        if named.is_file():
            return Ok(named)
        return Err(DescriptorScanError(reason="missing", directory=directory))

    if not directory.is_dir():
        return Err(DescriptorScanError(reason="none", directory=directory))

    matches = sorted(
        p for p in directory.iterdir() if p.name.endswith(DESCRIPTOR_SUFFIX) and p.is_file()
    )
    if not matches:
        return Err(DescriptorScanError(reason="none", directory=directory))
    if len(matches) > 1:
        return Err(
            DescriptorScanError(
                reason="multiple",
                directory=directory,
                candidates=tuple(matches),
            )
        )
    return Ok(matches[0])


def load_descriptor(
    path: Path,
    *,
    runner: CommandRunner,
    ruby_command: Sequence[str] = ("ruby",),
) -> Result[PackageDescriptor, HelperError]:
    """Evaluate a gemspec with Ruby and return its descriptor.

    The gemspec is evaluated from its own directory, since gemspecs commonly
    call ``git ls-files`` or use ``__dir__``.
    """
    result = runner.run(
        [*ruby_command, "-e", _LOADER_SCRIPT, str(path)],
        cwd=path.parent,
    )
    if isinstance(result, Err):
        return Err(
            HelperError(
                kind="setup",
                message=f"Failed to load gemspec {path.name}",
                hint=result.error.output.strip() or None,
            )
        )

    try:
        payload: object = json.loads(result.value.strip().splitlines()[-1])
    except (json.JSONDecodeError, IndexError) as e:
        return Err(
            HelperError(
                kind="setup",
                message=f"Gemspec loader returned invalid JSON for {path.name}: {e}",
                hint=result.value.strip() or None,
            )
        )

    data = as_str_dict(payload)
    name = get_str(data, "name") if data else None
    version = get_str(data, "version") if data else None
    if data is None or name is None or version is None:
        return Err(
            HelperError(
                kind="setup",
                message=f"Gemspec {path.name} does not declare a name and version",
            )
        )

    return Ok(
        PackageDescriptor(
            path=path,
            name=name,
            version=version,
            homepage=get_str(data, "homepage"),
            metadata=get_str_map(data, "metadata"),
        )
    )


def resolve_descriptor(
    base: Path | None,
    name: str | None,
    *,
    runner: CommandRunner,
    ruby_command: Sequence[str] = ("ruby",),
) -> Result[PackageDescriptor, HelperError]:
    """Scan ``base`` for its gemspec and load it."""
    scan = scan_descriptors(base, name)
    if isinstance(scan, Err):
        hint: str | None = None
        if scan.error.candidates:
            hint = "found: " + ", ".join(p.name for p in scan.error.candidates)
        return Err(HelperError(kind="setup", message=scan.error.message, hint=hint))
    return load_descriptor(scan.value, runner=runner, ruby_command=ruby_command)

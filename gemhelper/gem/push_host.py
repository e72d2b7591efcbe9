"""Registry host selection for ``gem push``."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from gemhelper.gem.descriptor import PackageDescriptor

__all__ = ["DEFAULT_PUSH_HOST", "HOST_ENV_VAR", "PushTarget", "resolve_push_target"]

DEFAULT_PUSH_HOST = "rubygems.org"
HOST_ENV_VAR = "RUBYGEMS_HOST"


@dataclass(frozen=True, slots=True)
class PushTarget:
    """Where a gem will be published.

    Attributes:
        host: Value for ``--host``; None lets ``gem`` pick (env or default)
        display: Host name used in user-facing messages
        source: Which rule selected the host
    """

    host: str | None
    display: str
    source: Literal["descriptor", "environment", "default"]

    def push_args(self) -> list[str]:
        return ["--host", self.host] if self.host else []


def resolve_push_target(descriptor: PackageDescriptor, environ: Mapping[str, str]) -> PushTarget:
    """First match wins: gemspec ``allowed_push_host``, ``RUBYGEMS_HOST``, rubygems.org.

    Only the gemspec host is passed explicitly; ``gem push`` reads
    ``RUBYGEMS_HOST`` from the environment it inherits.
    """
    allowed = descriptor.allowed_push_host
    if allowed:
        return PushTarget(host=allowed, display=allowed, source="descriptor")

    env_host = environ.get(HOST_ENV_VAR, "")
    if env_host:
        return PushTarget(host=None, display=env_host, source="environment")

    return PushTarget(host=None, display=DEFAULT_PUSH_HOST, source="default")

"""Gemspec resolution, archive operations and the release flow."""

from .artifacts import BuildArtifact, ChecksumRecord
from .descriptor import DescriptorScanError, PackageDescriptor, scan_descriptors
from .helper import GemHelper
from .push_host import PushTarget, resolve_push_target

__all__ = [
    "BuildArtifact",
    "ChecksumRecord",
    "DescriptorScanError",
    "GemHelper",
    "PackageDescriptor",
    "PushTarget",
    "resolve_push_target",
    "scan_descriptors",
]

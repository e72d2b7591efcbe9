"""Build, checksum, install and release Ruby gems from a gemspec."""

__version__ = "0.3.0"

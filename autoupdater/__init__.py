"""autoupdater: find, download and install newer releases of a running program."""

__version__ = "0.1.0"

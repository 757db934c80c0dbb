"""Ruby version management: discover, pin, install, run and activate Ruby interpreters."""

__version__ = "0.1.1"
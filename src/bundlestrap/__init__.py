"""bundlestrap: fetch a remote application bundle, unpack it and run it."""

__version__ = "0.1.0"

"""Verify files against the Adler-32 checksum stored in their extended attributes."""

# NOTE: `__version__` is not defined; use `importlib.metadata.version("adler32cmp")`
#   if you need to access version info at runtime.

"""Run adler32-cmp with `python -m adler32cmp`."""

from .adler32_cmd import main

main()

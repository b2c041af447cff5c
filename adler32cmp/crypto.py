# crypto.py
"""Module that provides the Adler-32 checksum services."""

import os
import re
from typing import Iterable, Union
import zlib

# Adler-32 of the empty stream
ADLER32_SEED = 1

# A GPFS block in the Tier2 storage file system
BLOCK_SIZE = 256 * 1024

# the smallest block size we are willing to read with
MINIMUM_BLOCK_SIZE = 4 * 1024

# hex representation of the widest value we will store or read back
MAXIMUM_CHECKSUM_DIGITS = 16

HEX_CHECKSUM = re.compile(r"(0[xX])?[0-9a-fA-F]+")


def adler32_blocks(blocks: Iterable[Union[bytes, memoryview]], value: int = ADLER32_SEED) -> int:
    """Fold a sequence of byte blocks into a running Adler-32 value."""
    for block in blocks:
        value = zlib.adler32(block, value)
    return value & 0xffffffff


def adler32_fd(fd: int, block_size: int = BLOCK_SIZE) -> int:
    """
    Compute the Adler-32 checksum of the data readable from an open descriptor.

    fd - The file descriptor to be read until end-of-file.
    block_size - The size of each read; memory use is bounded by this value.

    Returns the checksum as an unsigned 32-bit int. Any OSError raised by
    the underlying read (EIO, EISDIR, ...) propagates to the caller intact.
    """
    if block_size < MINIMUM_BLOCK_SIZE:
        raise ValueError(f"block_size: Expected at least {MINIMUM_BLOCK_SIZE} bytes, got {block_size}")
    b = bytearray(block_size)
    mv = memoryview(b)
    # each block is folded before the buffer is refilled by the next read
    return adler32_blocks(mv[:n] for n in iter(lambda: os.readv(fd, [mv]), 0))


def adler32sum(filename: str, block_size: int = BLOCK_SIZE) -> str:
    """Compute the adler32 checksum of the data in the specified file."""
    fd = os.open(filename, os.O_RDONLY)
    try:
        return format_checksum(adler32_fd(fd, block_size))
    finally:
        os.close(fd)


def format_checksum(value: int) -> str:
    """Render a checksum as lowercase hex text, without zero padding."""
    return "%x" % (value & 0xffffffff)


def parse_checksum(text: str) -> int:
    """
    Parse the hex text of a stored checksum.

    Surrounding whitespace, trailing NUL padding and an optional '0x'
    prefix are tolerated. Raises ValueError if the text is not hex.
    """
    cleaned = text.strip().rstrip("\x00").strip()
    if not HEX_CHECKSUM.fullmatch(cleaned):
        raise ValueError(f"not a hex checksum: {text!r}")
    return int(cleaned, 16)

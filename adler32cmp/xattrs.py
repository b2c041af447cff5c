# xattrs.py
"""Module to read and write checksums kept in extended file attributes."""

import errno
import logging
import os

from .crypto import MAXIMUM_CHECKSUM_DIGITS

LOG = logging.getLogger(__name__)

DEFAULT_ATTRIBUTE_NAME = "user.storm.checksum.adler32"

# Linux reports a missing attribute as ENODATA; BSD-derived systems as ENOATTR
MISSING_ATTRIBUTE_ERRNOS = {getattr(errno, name) for name in ("ENODATA", "ENOATTR") if hasattr(errno, name)}


class MetadataError(Exception):
    """Raised when a stored checksum cannot be read or written."""

    def __init__(self, message: str, errnum: int = 0) -> None:
        """Record the message and the errno (if any) behind the failure."""
        super(MetadataError, self).__init__(message)
        self.errno = errnum


class AttributeNotFound(MetadataError):
    """Raised when the file carries no stored checksum attribute."""


class MetadataStore:
    """
    MetadataStore is the interface to per-file checksum metadata.

    Both operations act on an already open file descriptor, so the metadata
    always belongs to the same file whose content was checksummed.
    """

    def get(self, fd: int, name: str) -> str:
        """Return the text of the named attribute, or raise a MetadataError."""
        raise NotImplementedError()

    def set(self, fd: int, name: str, value: str) -> None:
        """Store the text of the named attribute, or raise a MetadataError."""
        raise NotImplementedError()


class XattrStore(MetadataStore):
    """XattrStore keeps checksum metadata in filesystem extended attributes."""

    def get(self, fd: int, name: str) -> str:
        """Read the named extended attribute from the open file."""
        try:
            raw = os.getxattr(fd, name)
        except OSError as e:
            if e.errno in MISSING_ATTRIBUTE_ERRNOS:
                raise AttributeNotFound(os.strerror(e.errno), e.errno) from e
            raise MetadataError(e.strerror or str(e), e.errno or 0) from e
        # the stored value is the hex text of a checksum; anything longer is not ours
        raw = raw.rstrip(b"\x00")
        if len(raw) > MAXIMUM_CHECKSUM_DIGITS:
            raise MetadataError(os.strerror(errno.ERANGE), errno.ERANGE)
        try:
            return raw.decode("ascii")
        except UnicodeDecodeError as e:
            raise MetadataError(f"attribute {name} is not ASCII text") from e

    def set(self, fd: int, name: str, value: str) -> None:
        """Write the named extended attribute onto the open file."""
        LOG.debug(f"Setting attribute {name}={value} on fd {fd}")
        try:
            os.setxattr(fd, name, value.encode("ascii"))
        except OSError as e:
            raise MetadataError(e.strerror or str(e), e.errno or 0) from e

"""Module to provide testing utility functions, objects, etc."""

# fmt:off

import errno
import os
from typing import Dict, List, Tuple

from adler32cmp.xattrs import AttributeNotFound, MetadataError, MetadataStore

FileKey = Tuple[int, int]


def file_key(st: os.stat_result) -> FileKey:
    """Identify a file by device and inode, as its metadata would be."""
    return (st.st_dev, st.st_ino)


class DictStore(MetadataStore):
    """
    DictStore is an in-memory MetadataStore.

    Attributes are kept per file (device and inode), so they follow the file
    no matter which descriptor is used to reach it.
    """

    def __init__(self) -> None:
        """Start out with no attributes on any file."""
        self.attrs: Dict[FileKey, Dict[str, str]] = {}
        self.get_calls: List[str] = []
        self.set_calls: List[Tuple[str, str]] = []

    def put(self, path: str, name: str, value: str) -> None:
        """Attach an attribute to the file at the given path."""
        self.attrs.setdefault(file_key(os.stat(path)), {})[name] = value

    def peek(self, path: str, name: str) -> str:
        """Return the attribute on the file at the given path, if any."""
        return self.attrs.get(file_key(os.stat(path)), {}).get(name)

    def get(self, fd: int, name: str) -> str:
        """Return the named attribute of the open file."""
        self.get_calls.append(name)
        attrs = self.attrs.get(file_key(os.fstat(fd)), {})
        if name not in attrs:
            raise AttributeNotFound(os.strerror(errno.ENODATA), errno.ENODATA)
        return attrs[name]

    def set(self, fd: int, name: str, value: str) -> None:
        """Set the named attribute of the open file."""
        self.set_calls.append((name, value))
        self.attrs.setdefault(file_key(os.fstat(fd)), {})[name] = value


class BrokenStore(DictStore):
    """BrokenStore is a DictStore whose lookups or writes fail."""

    def __init__(self, get_errno: int = 0, set_errno: int = 0) -> None:
        """Fail get with get_errno and set with set_errno (when non-zero)."""
        super(BrokenStore, self).__init__()
        self.get_errno = get_errno
        self.set_errno = set_errno

    def get(self, fd: int, name: str) -> str:
        """Fail to read the attribute, if configured to."""
        if self.get_errno:
            self.get_calls.append(name)
            raise MetadataError(os.strerror(self.get_errno), self.get_errno)
        return super(BrokenStore, self).get(fd, name)

    def set(self, fd: int, name: str, value: str) -> None:
        """Fail to write the attribute, if configured to."""
        if self.set_errno:
            self.set_calls.append((name, value))
            raise MetadataError(os.strerror(self.set_errno), self.set_errno)
        super(BrokenStore, self).set(fd, name, value)


class ScriptedConfirm:
    """ScriptedConfirm answers operator prompts from a script."""

    def __init__(self, *answers: bool) -> None:
        """Provide the answers to give, in order."""
        self.answers = list(answers)
        self.prompts: List[str] = []

    def __call__(self, prompt: str) -> bool:
        """Record the prompt and give the next scripted answer."""
        self.prompts.append(prompt)
        return self.answers.pop(0)

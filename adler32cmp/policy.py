# policy.py
"""
Module to reconcile a computed checksum with the one stored on the file.

Everything in this module is free of side effects. The functions turn the
result of each processing step (open, read, metadata lookup) into a Decision;
the caller is responsible for printing, prompting, deleting and writing.
"""

import dataclasses
import errno
from enum import Enum
from typing import Dict, Union

from .crypto import parse_checksum
from .xattrs import AttributeNotFound, DEFAULT_ATTRIBUTE_NAME, MetadataError

ExitCode = int
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISSING_FILE = 2
EXIT_IO_ERROR = 3
EXIT_BAD_CHECKSUM = 4


class Outcome(Enum):
    """The verdict reached for a single file."""

    VERIFIED = "verified"
    MISMATCH = "mismatch"
    MISSING_FILE = "missing-file"
    READ_ERROR_IO = "read-error-io"
    READ_ERROR_IS_DIRECTORY = "read-error-is-directory"
    METADATA_MISSING = "metadata-missing"
    METADATA_ERROR = "metadata-error"
    GENERIC_ERROR = "generic-error"

    @property
    def exit_code(self) -> ExitCode:
        """Provide the process exit code that reports this outcome."""
        return EXIT_CODES[self]

    @property
    def failed(self) -> bool:
        """Determine if this outcome counts against the run."""
        return self is not Outcome.VERIFIED


EXIT_CODES: Dict[Outcome, ExitCode] = {
    Outcome.VERIFIED: EXIT_OK,
    Outcome.MISMATCH: EXIT_BAD_CHECKSUM,
    Outcome.MISSING_FILE: EXIT_MISSING_FILE,
    Outcome.READ_ERROR_IO: EXIT_IO_ERROR,
    Outcome.READ_ERROR_IS_DIRECTORY: EXIT_ERROR,
    Outcome.METADATA_MISSING: EXIT_ERROR,
    Outcome.METADATA_ERROR: EXIT_ERROR,
    Outcome.GENERIC_ERROR: EXIT_ERROR,
}


class Action(Enum):
    """A follow-up side effect requested by a Decision."""

    NONE = "none"
    DELETE_FILE = "delete-file"
    SET_CHECKSUM = "set-checksum"


@dataclasses.dataclass(frozen=True)
class Flags:
    """The operator's policy choices for this run."""

    verbose: bool = False
    interactive: bool = False
    set_checksum: bool = False
    delete_bad: bool = False
    attribute_name: str = DEFAULT_ATTRIBUTE_NAME

    def __post_init__(self) -> None:
        """Interactive mode is always verbose."""
        if self.interactive and not self.verbose:
            object.__setattr__(self, "verbose", True)


@dataclasses.dataclass(frozen=True)
class Decision:
    """
    The outcome for one file, and what (if anything) should be done about it.

    outcome - The verdict for the file.
    action - The side effect to carry out.
    confirm - If True, the action is only carried out if the operator agrees.
    """

    outcome: Outcome
    action: Action = Action.NONE
    confirm: bool = False


def decide_open_failure(error: OSError) -> Decision:
    """Classify a failure to open the target file."""
    if error.errno == errno.ENOENT:
        return Decision(Outcome.MISSING_FILE)
    return Decision(Outcome.GENERIC_ERROR)


def decide_read_failure(error: OSError, flags: Flags) -> Decision:
    """Classify a failure while reading the target file's content."""
    if error.errno == errno.EIO:
        # -d removes unreadable files without asking
        if flags.delete_bad:
            return Decision(Outcome.READ_ERROR_IO, Action.DELETE_FILE)
        if flags.interactive:
            return Decision(Outcome.READ_ERROR_IO, Action.DELETE_FILE, confirm=True)
        return Decision(Outcome.READ_ERROR_IO)
    if error.errno == errno.EISDIR:
        return Decision(Outcome.READ_ERROR_IS_DIRECTORY)
    return Decision(Outcome.GENERIC_ERROR)


def reconcile(computed: int, stored: Union[str, MetadataError], flags: Flags) -> Decision:
    """
    Compare the computed checksum against the result of the metadata lookup.

    computed - The checksum computed from the file's content.
    stored - The stored checksum text, or the MetadataError from its lookup.
    flags - The operator's policy choices.

    A file without a stored checksum never verifies, even when the computed
    value is about to be stored on it.
    """
    if isinstance(stored, AttributeNotFound) and (flags.interactive or flags.set_checksum):
        # -c writes the checksum without asking
        if flags.set_checksum:
            return Decision(Outcome.METADATA_MISSING, Action.SET_CHECKSUM)
        return Decision(Outcome.METADATA_MISSING, Action.SET_CHECKSUM, confirm=True)
    if isinstance(stored, MetadataError):
        return Decision(Outcome.METADATA_ERROR)
    try:
        saved = parse_checksum(stored)
    except ValueError:
        return Decision(Outcome.MISMATCH)
    if saved == computed:
        return Decision(Outcome.VERIFIED)
    return Decision(Outcome.MISMATCH)


class ExitStatus:
    """Track the process exit code across all of the targets of a run."""

    def __init__(self) -> None:
        """Start out successful."""
        self.code: ExitCode = EXIT_OK

    def record(self, outcome: Outcome) -> None:
        """Remember the exit code of the most recent failing outcome."""
        if outcome.failed:
            self.code = outcome.exit_code

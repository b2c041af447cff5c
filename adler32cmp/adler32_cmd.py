"""
Command line utility to verify files against their stored Adler-32 checksum.

Run with `python -m adler32cmp $@` or `adler32-cmp $@`.
"""

import argparse
import logging
import os
import re
import sys
from typing import Callable, Iterable, List, NoReturn, Optional, TextIO, Tuple, Union

from .config import Adler32CmpEnv, load_config
from .crypto import adler32_fd, BLOCK_SIZE, format_checksum
from .log_format import configure_logging
from .policy import (
    Action,
    Decision,
    decide_open_failure,
    decide_read_failure,
    EXIT_ERROR,
    ExitCode,
    ExitStatus,
    Flags,
    Outcome,
    reconcile,
)
from .xattrs import MetadataError, MetadataStore, XattrStore

Confirm = Callable[[str], bool]
Namespace = argparse.Namespace

LOG = logging.getLogger(__name__)

USAGE = "Usage: %s [-v | -i] [-c] [-d] [-n <attribute_name>] <file> ..."

SPLIT_PATH = re.compile(r"([^/]*)/([^/]*)$")

# -----------------------------------------------------------------------------


class UsageError(Exception):
    """Raised when the command line cannot be understood."""


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that leaves usage reporting and exit codes to us."""

    def error(self, message: str) -> NoReturn:
        """Signal a usage error instead of exiting with argparse's status 2."""
        raise UsageError(message)


def console_confirm(prompt: str) -> bool:
    """Ask the operator a yes/no question on the console; the default is no."""
    sys.stdout.flush()
    sys.stderr.write(prompt)
    sys.stderr.flush()
    answer = sys.stdin.readline()
    return answer[:1] in ("y", "Y")


def describe(e: BaseException) -> str:
    """Provide the system's description of an error."""
    if isinstance(e, OSError) and e.strerror:
        return e.strerror
    return str(e)


def split_path(path: str) -> Optional[Tuple[str, str]]:
    """Split the last two segments (dataset, file) off of a path."""
    match = SPLIT_PATH.search(path)
    if not match:
        return None
    return (match.group(1), match.group(2))

# -----------------------------------------------------------------------------


class Checker:
    """
    Checker verifies files against the checksum stored in their metadata.

    Each file is handled on its own: errors are reported and classified, and
    never stop the files that follow. The file descriptor of each file is
    closed before moving on to the next one.
    """

    def __init__(self,
                 flags: Flags,
                 store: MetadataStore,
                 confirm: Confirm = console_confirm,
                 block_size: int = BLOCK_SIZE,
                 lookup_command: str = "dq2-list-files",
                 out: Optional[TextIO] = None,
                 err: Optional[TextIO] = None) -> None:
        """
        Create a Checker.

        flags - The operator's policy choices.
        store - Where the stored checksums are read from and written to.
        confirm - Asks the operator a yes/no question.
        block_size - Size of each read while computing checksums.
        lookup_command - Command suggested for finding a missing checksum.
        out - Stream for verdicts; defaults to stdout.
        err - Stream for error reports; defaults to stderr.
        """
        self.flags = flags
        self.store = store
        self.confirm = confirm
        self.block_size = block_size
        self.lookup_command = lookup_command
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr

    def run(self, filenames: Iterable[str]) -> ExitCode:
        """Check every file, and return the exit code of the last failure."""
        status = ExitStatus()
        for filename in filenames:
            try:
                outcome = self.check_file(filename)
            except Exception as e:
                LOG.error(f"Unexpected error while checking {filename}", exc_info=True)
                self._error(f"Error checking file {filename}: {describe(e)}")
                outcome = Outcome.GENERIC_ERROR
            LOG.debug(f"{filename}: {outcome.value}")
            status.record(outcome)
        return status.code

    def check_file(self, filename: str) -> Outcome:
        """Check a single file and return its outcome."""
        if self.flags.verbose:
            self._say(f"Examining {filename}")
        try:
            fd = os.open(filename, os.O_RDONLY)
        except OSError as e:
            LOG.info(f"Unable to open {filename}: {describe(e)}")
            if self.flags.verbose:
                self._say(f"Error opening file: {describe(e)}")
            else:
                self._error(f"Error opening file {filename}: {describe(e)}")
            return decide_open_failure(e).outcome
        try:
            return self._check_fd(filename, fd)
        finally:
            os.close(fd)

    def _check_fd(self, filename: str, fd: int) -> Outcome:
        """Compute, look up and compare the checksum of an open file."""
        try:
            computed = adler32_fd(fd, self.block_size)
        except OSError as e:
            return self._read_failed(filename, e)
        computed_text = format_checksum(computed)
        LOG.debug(f"Computed checksum of {filename}: {computed_text}")
        if self.flags.verbose:
            self._say(f"Computed checksum: {computed_text}")

        stored: Union[str, MetadataError]
        try:
            stored = self.store.get(fd, self.flags.attribute_name)
        except MetadataError as e:
            stored = e
        decision = reconcile(computed, stored, self.flags)

        if decision.outcome is Outcome.METADATA_MISSING:
            self._offer_checksum(filename, fd, computed_text, decision)
            return decision.outcome
        if isinstance(stored, MetadataError):
            LOG.info(f"Unable to get saved checksum of {filename}: {stored}")
            if self.flags.verbose:
                self._say(f"error getting saved checksum: {stored}")
            else:
                self._error(f"Error getting saved checksum for file {filename}: {stored}")
            return decision.outcome

        if self.flags.verbose:
            self._say(f"Saved checksum: {stored}")
        verdict = "Checksum verified" if decision.outcome is Outcome.VERIFIED else "Checksum mismatch!"
        if decision.outcome is Outcome.MISMATCH:
            LOG.info(f"Checksum mismatch for {filename}: computed {computed_text}, saved {stored}")
        if self.flags.verbose:
            self._say(verdict)
        else:
            self._say(f"{filename} - {verdict}")
        return decision.outcome

    def _read_failed(self, filename: str, e: OSError) -> Outcome:
        """Report a failure to read the file, and delete it if asked."""
        decision = decide_read_failure(e, self.flags)
        LOG.info(f"Unable to read {filename}: {describe(e)}")
        if decision.outcome is Outcome.READ_ERROR_IS_DIRECTORY and self.flags.verbose:
            self._say("It's a directory, skipping")
        else:
            self._error(f"Error reading file {filename}: {describe(e)}")
        if self._agreed(decision, "I/O error: remove the file? [y/N] "):
            self._delete(filename)
        return decision.outcome

    def _offer_checksum(self, filename: str, fd: int, computed_text: str, decision: Decision) -> None:
        """Store the computed checksum on a file that has none, if asked."""
        if self.flags.interactive:
            segments = split_path(filename)
            if segments:
                self._say("No saved checksum: you might want to try the following command from a UI:")
                self._say(f"{self.lookup_command} {segments[0]} | grep {segments[1]}")
            else:
                self._say("No saved checksum")
        if not self._agreed(decision, f"set the checksum to the computed value ({computed_text})? [y/N] "):
            return
        try:
            self.store.set(fd, self.flags.attribute_name, computed_text)
        except MetadataError as e:
            LOG.info(f"Unable to set saved checksum of {filename}: {e}")
            self._error(f"Error setting saved checksum for file {filename}: {e}")
            return
        LOG.info(f"Set {self.flags.attribute_name}={computed_text} on {filename}")
        if self.flags.verbose:
            self._say(f"Saved checksum set to {computed_text}")

    def _agreed(self, decision: Decision, prompt: str) -> bool:
        """Determine if the action of the decision should be carried out."""
        if decision.action is Action.NONE:
            return False
        if decision.confirm:
            return self.confirm(prompt)
        return True

    def _delete(self, filename: str) -> None:
        """Remove an unreadable file."""
        try:
            os.unlink(filename)
        except OSError as e:
            LOG.info(f"Unable to remove {filename}: {describe(e)}")
            self._error(f"Error removing file {filename}: {describe(e)}")
            return
        LOG.info(f"Removed unreadable file {filename}")
        if self.flags.verbose:
            self._say(f"Removed {filename}")

    def _error(self, message: str) -> None:
        print(message, file=self.err)

    def _say(self, message: str) -> None:
        print(message, file=self.out)

# -----------------------------------------------------------------------------


def make_parser() -> ArgumentParser:
    """Create the parser for the adler32-cmp command line."""
    parser = ArgumentParser(
        prog="adler32-cmp",
        description="Compare the Adler-32 checksum of files with the one stored in their extended attributes.",
        add_help=False,
    )
    parser.add_argument("-v",
                        dest="verbose",
                        help="print both checksums",
                        action="store_true")
    parser.add_argument("-i",
                        dest="interactive",
                        help="prompt before deleting or fixing files (implies -v)",
                        action="store_true")
    parser.add_argument("-c",
                        dest="set_checksum",
                        help="store the computed checksum on files that have none",
                        action="store_true")
    parser.add_argument("-d",
                        dest="delete_bad",
                        help="delete files that cannot be read",
                        action="store_true")
    parser.add_argument("-n",
                        dest="attribute_name",
                        metavar="attribute_name",
                        help="name of the checksum attribute")
    parser.add_argument("files",
                        metavar="file",
                        nargs="*")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> Namespace:
    """Parse the command line; raise UsageError if it makes no sense."""
    args = make_parser().parse_intermixed_args(argv)
    if not args.files:
        raise UsageError("no files specified")
    return args


def check_files(args: Namespace,
                config: Adler32CmpEnv,
                store: Optional[MetadataStore] = None,
                confirm: Confirm = console_confirm) -> ExitCode:
    """Check the files named on the command line."""
    flags = Flags(verbose=args.verbose,
                  interactive=args.interactive,
                  set_checksum=args.set_checksum,
                  delete_bad=args.delete_bad,
                  attribute_name=args.attribute_name or config.ADLER32_ATTRIBUTE_NAME)
    checker = Checker(flags,
                      store if store is not None else XattrStore(),
                      confirm=confirm,
                      block_size=config.ADLER32_BLOCK_SIZE,
                      lookup_command=config.ADLER32_LOOKUP_COMMAND)
    return checker.run(args.files)


def main(argv: Optional[List[str]] = None) -> None:
    """Verify the files named on the command line and exit accordingly."""
    try:
        args = parse_args(argv)
    except UsageError:
        print(USAGE % "adler32-cmp", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    try:
        config = load_config()
        configure_logging(config)
    except Exception as e:
        print(f"Error in configuration: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    sys.exit(check_files(args, config))


if __name__ == '__main__':
    main()

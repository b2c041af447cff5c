"""Pytest fixtures and plugins."""

import logging

import pytest

from adler32cmp.crypto import adler32_blocks, format_checksum

FOX = b"The quick brown fox jumps over the lazy dog\n"


def pytest_configure(config):
    logging.disable(logging.NOTSET)
    logging.getLogger().setLevel(logging.DEBUG)


@pytest.fixture
def fox_file(tmp_path):
    """Supply a file with known content, and its checksum text."""
    path = tmp_path / "a.txt"
    path.write_bytes(FOX)
    return str(path), format_checksum(adler32_blocks([FOX]))

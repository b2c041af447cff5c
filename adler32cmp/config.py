# config.py
"""Module to provide configuration support."""

import dataclasses

from wipac_dev_tools import from_environment_as_dataclass

from .crypto import BLOCK_SIZE, MINIMUM_BLOCK_SIZE
from .xattrs import DEFAULT_ATTRIBUTE_NAME


@dataclasses.dataclass(frozen=True)
class Adler32CmpEnv:
    """Typed environment configuration for adler32-cmp."""

    # Optional
    ADLER32_ATTRIBUTE_NAME: str = DEFAULT_ATTRIBUTE_NAME
    ADLER32_BLOCK_SIZE: int = BLOCK_SIZE
    ADLER32_LOOKUP_COMMAND: str = "dq2-list-files"
    LOG_LEVEL: str = "WARNING"
    LOG_JSON: bool = False

    def __post_init__(self) -> None:
        """Reject configuration values that cannot work."""
        if self.ADLER32_BLOCK_SIZE < MINIMUM_BLOCK_SIZE:
            raise ValueError(f"ADLER32_BLOCK_SIZE: Expected at least {MINIMUM_BLOCK_SIZE}, got {self.ADLER32_BLOCK_SIZE}")
        if not self.ADLER32_ATTRIBUTE_NAME:
            raise ValueError("ADLER32_ATTRIBUTE_NAME: Expected a non-empty attribute name")


def load_config() -> Adler32CmpEnv:
    """Obtain the configuration of adler32-cmp from the OS environment."""
    return from_environment_as_dataclass(Adler32CmpEnv, log_vars=None)

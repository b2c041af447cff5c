# log_format.py
"""
Module to provide support for structured logging.

adler32-cmp keeps its operator-facing verdicts on stdout; diagnostic logging
goes to stderr, either as plain text or as NDJSON (http://ndjson.org/) when
LOG_JSON is enabled:

    $ LOG_JSON=true LOG_LEVEL=DEBUG adler32-cmp -v /storage/atlas/file.root
"""

from datetime import datetime, timezone
import json
import logging
from logging import Formatter, LogRecord
import socket
import sys
import traceback
from typing import Any, Dict, Optional

from .config import Adler32CmpEnv

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

# LogRecord attributes that add nothing to a structured record
OMITTED_FIELDS = {"args", "msg", "exc_text", "stack_info"}


class StructuredFormatter(Formatter):
    """
    StructuredFormatter is a Formatter for structured logging.

    LogRecord objects are formatted as JSON. Under the default configuration,
    a StructuredFormatter will render these as NDJSON.
    """

    def __init__(self,
                 component_name: Optional[str] = None,
                 component_type: Optional[str] = None,
                 ndjson: bool = True) -> None:
        """
        Create a StructuredFormatter object.

        component_name: Optional[str] - The name of the software component
        component_type: Optional[str] - The type of the software component
        ndjson: bool - Output as NDJSON; defaults to True.
        """
        self.component_name = component_name
        self.component_type = component_type
        self.indent = None if ndjson else 4
        self.separators = (',', ':') if ndjson else (', ', ': ')
        super(StructuredFormatter, self).__init__()

    def format(self, record: LogRecord) -> str:
        """
        Format a LogRecord object as a log message.

        record - LogRecord object to be formatted

        Returns a log message as a str. In the default configuration, this
        is JSON on a single line (NDJSON).
        """
        data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'message': record.getMessage(),
        }
        for key, value in vars(record).items():
            if key not in OMITTED_FIELDS:
                data[key] = value
        if data.get("exc_info"):
            exc_type, exc_value, exc_tb = data["exc_info"]
            data["exc_info"] = traceback.format_exception(exc_type, exc_value, exc_tb)
        if self.component_type:
            data['component_type'] = self.component_type
        if self.component_name:
            data['component_name'] = self.component_name
        # anything JSON can't represent natively is logged as its str()
        return json.dumps(data, indent=self.indent, separators=self.separators, default=str)


def configure_logging(config: Adler32CmpEnv) -> None:
    """Configure the root logger to write to stderr as the environment asks."""
    stream_handler = logging.StreamHandler(sys.stderr)
    if config.LOG_JSON:
        stream_handler.setFormatter(StructuredFormatter(
            component_type='adler32-cmp',
            component_name=socket.gethostname(),
            ndjson=True))
    else:
        stream_handler.setFormatter(Formatter(TEXT_FORMAT))
    root_logger = logging.getLogger(None)
    root_logger.setLevel(config.LOG_LEVEL.upper())
    root_logger.addHandler(stream_handler)

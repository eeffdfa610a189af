# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Structured logging setup for the relationship catalog.

Log records about a single catalog entry carry its id and relation kind as
extra fields (see entry_context()), so the JSON log can be filtered per entry.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from relationship_catalog.models import RelationshipExample

DEFAULT_LOG_DIRNAME = ".relationship_catalog_logs"
LOG_FILE_PREFIX = "relationship_catalog_"

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Marks handlers installed by setup_logging() so a later call can close them
_OWNED_HANDLER_ATTR = "_relationship_catalog_owned"


def entry_context(example: "RelationshipExample") -> Dict[str, Any]:
    """Build the ``extra`` mapping that tags a log record with a catalog entry.

    Usage:
        logger.warning("Skipping entry", extra=entry_context(example))
    """
    return {"extra_fields": {"example_id": example.id, "kind": example.kind}}


class StructuredFormatter(logging.Formatter):
    """Formats records as one JSON object per line.

    The timestamp is the time the record was created, in UTC. Fields passed
    through ``extra_fields`` are merged into the top level of the object.
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        log_data: Dict[str, Any] = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "source": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_data.update(extra_fields)

        return json.dumps(log_data, default=str)


def log_file_path(log_dir: Path, day: Optional[datetime] = None) -> Path:
    """Daily log file inside log_dir, named after the UTC date."""
    day = day or datetime.now(timezone.utc)
    return log_dir / f"{LOG_FILE_PREFIX}{day.strftime('%Y%m%d')}.log"


def _release_handlers(root_logger: logging.Logger) -> None:
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        if getattr(handler, _OWNED_HANDLER_ATTR, False):
            handler.close()


def setup_logging(
    log_dir: Optional[Path] = None,
    log_level: int = logging.INFO,
    console_output: bool = True,
) -> Path:
    """Send root logging to a JSON-lines file, and optionally to stderr.

    Existing root handlers are replaced. File handlers from an earlier call
    are closed. Console output never goes to stdout, which carries rendered
    documents and the MCP stdio transport.

    Args:
        log_dir: Directory for log files. If None, uses .relationship_catalog_logs/
        log_level: Logging level (default: INFO)
        console_output: Whether to also log human-readable lines to stderr

    Returns:
        Path of the JSON log file.
    """
    if log_dir is None:
        log_dir = Path.cwd() / DEFAULT_LOG_DIRNAME
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    _release_handlers(root_logger)

    log_file = log_file_path(log_dir)
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setFormatter(StructuredFormatter())
    handlers: List[logging.Handler] = [file_handler]

    if console_output:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
        handlers.append(console_handler)

    for handler in handlers:
        handler.setLevel(log_level)
        setattr(handler, _OWNED_HANDLER_ATTR, True)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).info(
        f"Logging initialized. Log file: {log_file}",
        extra={"extra_fields": {"log_dir": str(log_dir)}},
    )
    return log_file

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Generator, Optional, Union

# Logger hierarchy shared by the normform_core, normform_html and normform_web
# packages
NAMESPACE = "normform"

# Context-local storage for the id of the request currently being handled
correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


class TraceFormatter(logging.Formatter):
    """
    Formatter that prefixes records with the active correlation id and
    reports timestamps in UTC.
    """

    def __init__(self, fmt: str | None = None, datefmt: str | None = None):
        super().__init__(fmt, datefmt)
        self.converter = time.gmtime

    def formatTime(self, record, datefmt=None):  # noqa: N802
        """ISO-8601 UTC timestamps with millisecond precision."""
        ct = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, ct)
        t = time.strftime("%Y-%m-%d %H:%M:%S", ct)
        return "%s.%03dZ" % (t, record.msecs)

    def format(self, record: logging.LogRecord) -> str:
        cid = correlation_id.get()
        # Distinct attribute name to avoid collisions with extra={}
        record.trace_str = f"[{cid}] " if cid else ""
        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    """
    Returns the logger for a module path.

    Modules of the `normform_*` packages are folded into the single
    `normform` hierarchy, so configuring that one logger covers all of them:
    >>> get_logger("normform_html.view").name
    'normform.html.view'
    >>> get_logger("myapp.forms").name
    'myapp.forms'
    """
    head, sep, rest = name.partition("_")
    if head == NAMESPACE and sep:
        name = f"{NAMESPACE}.{rest}"
    return logging.getLogger(name)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10_485_760,  # 10MB
    backup_count: int = 10,
    capture_roots: bool = True,
    module_name: str = NAMESPACE,
) -> None:
    """
    Global logging configuration.

    Args:
        level: Logging level (INFO, DEBUG, etc.)
        log_file: Path to write logs to.
        capture_roots: If True, configures the root logger.
                       If False, only configures the `module_name` namespace.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    target_logger = (
        logging.getLogger() if capture_roots else logging.getLogger(module_name)
    )

    # Reset handlers so repeated calls (tests, reloads) don't stack them
    target_logger.handlers.clear()
    target_logger.setLevel(level)

    # %(trace_str)s is injected by TraceFormatter
    log_format = "%(asctime)s %(levelname)-8s %(trace_str)s%(name)s: %(message)s"
    formatter = TraceFormatter(log_format)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(formatter)
    target_logger.addHandler(console)

    if log_file:
        file_path = Path(log_file).resolve()
        try:
            file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(formatter)
            target_logger.addHandler(file_handler)
        except OSError as e:
            # Read-only filesystems still get console logging
            sys.stderr.write(f"Failed to setup log file: {e}\n")

    if not capture_roots:
        target_logger.propagate = False


def set_correlation_id(value: str) -> Token:
    """
    Sets the trace ID and returns a token for cleanup.

    >>> token = set_correlation_id("req-555")
    >>> reset_correlation_id(token)
    """
    return correlation_id.set(value)


def reset_correlation_id(token: Token) -> None:
    """
    Resets the correlation ID to its previous state.
    """
    correlation_id.reset(token)


@contextmanager
def scoped_correlation_id(value: str) -> Generator[None, None, None]:
    """
    Context manager for auto-cleaning trace IDs.

    >>> with scoped_correlation_id("req-123"):
    ...     pass
    """
    token = set_correlation_id(value)
    try:
        yield
    finally:
        reset_correlation_id(token)

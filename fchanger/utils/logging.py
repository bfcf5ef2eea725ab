"""Structured logging for fchanger, built on structlog.

Every conversion task runs inside ``request_context(item_id=...)`` so log lines
from the pipeline, the encoder and the vision providers can be tied back to the
batch item that produced them.
"""

import logging
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

# Re-export BoundLogger for type hints in other modules
BoundLogger = structlog.stdlib.BoundLogger

_request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
_item_var: ContextVar[str | None] = ContextVar("item", default=None)

# Image payloads and provider responses can be large; keep log lines readable
_MAX_VALUE_LENGTH = 500

_NOISY_LOGGERS = ["PIL", "asyncio", "httpx", "httpcore", "openai", "google_genai"]


def generate_request_id() -> str:
    """Short random id for correlating the log lines of one request or run."""
    return uuid.uuid4().hex[:8]


def get_request_id() -> str | None:
    return _request_id_var.get()


@contextmanager
def request_context(
    request_id: str | None = None, item_id: str | None = None
) -> Generator[str, None, None]:
    """Tag every log line in the block with a request id and, optionally, an item id.

    Values set by an enclosing context are restored on exit, so concurrent
    item tasks each see their own ids.

    Example:
        >>> with request_context(item_id="3fa2c1d09b7e"):
        ...     log.info("Converting image")  # includes item=3fa2c1d09b7e
    """
    tokens = [_request_id_var.set(request_id or generate_request_id())]
    if item_id is not None:
        tokens.append(_item_var.set(item_id))
    try:
        yield _request_id_var.get() or ""
    finally:
        for token in reversed(tokens):
            token.var.reset(token)


def _add_context(_logger: "WrappedLogger", _method_name: str, event_dict: "EventDict") -> "EventDict":
    """Add request_id and item from the current context unless already bound."""
    request_id = _request_id_var.get()
    if request_id:
        event_dict.setdefault("request_id", request_id)
    item = _item_var.get()
    if item:
        event_dict.setdefault("item", item)
    return event_dict


def _summarize_payloads(
    _logger: "WrappedLogger", _method_name: str, event_dict: "EventDict"
) -> "EventDict":
    """Replace raw image bytes with their size and clip very long strings."""
    for key, value in list(event_dict.items()):
        if isinstance(value, (bytes, bytearray, memoryview)):
            event_dict[key] = f"[BINARY DATA: {len(value)} bytes]"
        elif isinstance(value, str) and len(value) > _MAX_VALUE_LENGTH:
            event_dict[key] = value[:_MAX_VALUE_LENGTH] + f"... [{len(value)} chars total]"
    return event_dict


class SafeStreamHandler(logging.StreamHandler):
    """Stream handler that degrades unencodable characters instead of failing.

    Source filenames can contain characters a legacy console encoding (e.g.
    CP1252) cannot represent.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            try:
                self.stream.write(msg + self.terminator)
            except UnicodeEncodeError:
                encoding = self.stream.encoding or "utf-8"
                safe = msg.encode(encoding, errors="replace").decode(encoding, errors="replace")
                self.stream.write(safe + self.terminator)
            self.flush()
        except RecursionError:
            raise
        except Exception:
            self.handleError(record)


def _formatter(
    shared: list[structlog.types.Processor], json_format: bool, colors: bool
) -> structlog.stdlib.ProcessorFormatter:
    renderer: structlog.types.Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=colors,
            exception_formatter=structlog.dev.plain_traceback,
            pad_event_to=0,
            pad_level=False,
        )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_format: bool = False,
    console_level: str | None = None,
    file_level: str | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file, rotated at midnight with 7 days kept
        json_format: Render JSON lines instead of key=value text
        console_level: Override for the stderr handler level
        file_level: Override for the file handler level
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(log_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _add_context,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _summarize_payloads,
    ]

    console_handler = SafeStreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, console_level.upper()) if console_level else log_level)
    console_handler.setFormatter(_formatter(shared, json_format, colors=sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=7, encoding="utf-8"
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setLevel(getattr(logging, file_level.upper()) if file_level else log_level)
        file_handler.setFormatter(_formatter(shared, json_format, colors=False))
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,  # Allow reconfiguration
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog bound logger."""
    return structlog.get_logger(name)


def create_task_log_path(log_dir: str | Path, prefix: str = "task") -> tuple[str, Path]:
    """Return ``(task_id, path)`` for a new per-run log file.

    Example:
        >>> create_task_log_path(".logs", "convert")
        ('a1b2c3d4', PosixPath('.logs/convert_20260109_143052_a1b2c3d4.log'))
    """
    log_dir_path = Path(log_dir)
    log_dir_path.mkdir(parents=True, exist_ok=True)

    task_id = generate_request_id()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return task_id, log_dir_path / f"{prefix}_{timestamp}_{task_id}.log"


def setup_task_logging(
    log_dir: str | Path, prefix: str = "task", verbose: bool = False
) -> tuple[str, Path]:
    """Log a CLI run to its own DEBUG file.

    The console only shows warnings unless ``verbose``, so the progress bar
    stays readable.
    """
    task_id, log_path = create_task_log_path(log_dir, prefix)
    setup_logging(
        level="DEBUG",
        log_file=str(log_path),
        console_level="DEBUG" if verbose else "WARNING",
        file_level="DEBUG",
    )
    return task_id, log_path

# app/infra/logging_config.py
import logging
import sys
import json
from datetime import datetime, timezone

# Per-turn fields attached through LogContext (``extra=``)
CONTEXT_FIELDS = ("conversation_id", "user_id", "intent")


def _context_of(record: logging.LogRecord) -> dict:
    return {name: getattr(record, name) for name in CONTEXT_FIELDS if hasattr(record, name)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line (prod)"""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        payload.update(_context_of(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Coloured single-line output for local runs"""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname, self.RESET)
        when = datetime.fromtimestamp(record.created, timezone.utc).strftime("%H:%M:%S")

        ctx = _context_of(record)
        tags = []
        if "conversation_id" in ctx:
            tags.append(f"conv={mask_id(str(ctx['conversation_id']))}")
        if "user_id" in ctx:
            tags.append(f"user={mask_id(str(ctx['user_id']))}")
        if "intent" in ctx:
            tags.append(f"intent={ctx['intent']}")
        suffix = f" [{' '.join(tags)}]" if tags else ""

        line = f"{color}{when} {record.levelname:<8}{self.RESET} {record.name}{suffix}: {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(level: str = "INFO", use_json: bool = False) -> None:
    """
    Configure application logging

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_json: If True, use JSON format (for production)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    if use_json:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())

    root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logging.info("Logging configured: level=%s, json=%s", level, use_json)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(name)


def mask_id(value: str) -> str:
    """Shorten a channel identifier for log output: ``"29:1a2b3c4d5e"`` -> ``"29:1****5e"``."""
    if len(value) > 6:
        return value[:4] + "****" + value[-2:]
    return value


class LogContext:
    """Add conversation context to log records"""

    def __init__(
            self,
            logger: logging.Logger,
            conversation_id: str | None = None,
            user_id: str | None = None,
            intent: str | None = None,
    ):
        self.logger = logger
        self.context = {
            k: v for k, v in {
                "conversation_id": conversation_id,
                "user_id": user_id,
                "intent": intent,
            }.items() if v is not None
        }

    def bind(self, **extra) -> "LogContext":
        """Return a copy with additional context fields"""
        merged = {**self.context, **{k: v for k, v in extra.items() if v is not None}}
        ctx = LogContext(self.logger)
        ctx.context = merged
        return ctx

    def _log(self, level: int, msg: str, *args, **kwargs):
        extra = kwargs.pop("extra", {})
        extra.update(self.context)
        self.logger.log(level, msg, *args, extra=extra, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)

    def critical(self, msg: str, *args, **kwargs):
        self._log(logging.CRITICAL, msg, *args, **kwargs)

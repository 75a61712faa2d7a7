"""
Logging configuration for the GitLearn backend.

Console output is JSON in production and coloured in debug; everything
also goes to a rotating file under ``settings.log_dir``, errors to a
separate JSON file.
"""
import itertools
import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..config import get_settings

# LogRecord attributes that are not user-supplied "extra" fields
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename', 'module',
    'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName', 'created', 'msecs',
    'relativeCreated', 'thread', 'threadName', 'processName', 'process', 'taskName',
    'getMessage', 'message', 'asctime',
))

# Third-party loggers: (level, handlers)
_LIBRARY_LOGGERS = {
    'uvicorn': ('INFO', ['console']),
    'uvicorn.access': ('INFO', ['console']),
    'alembic': ('INFO', ['console', 'file']),
    # request lines are logged by our own client at DEBUG
    'httpx': ('WARNING', ['file']),
    'aiohttp': ('WARNING', ['file']),
    'sqlalchemy': ('WARNING', ['file']),
}

_LEVELS = {
    'CRITICAL': logging.CRITICAL,
    'ERROR': logging.ERROR,
    'WARNING': logging.WARNING,
    'INFO': logging.INFO,
    'DEBUG': logging.DEBUG,
}

_ROTATE_BYTES = 10_000_000  # 10MB


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            entry['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value) if exc_value else None,
                'traceback': self.formatException(record.exc_info),
            }

        extra = {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}
        if extra:
            entry['extra'] = extra

        return json.dumps(entry, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output."""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
    }
    RESET = '\033[0m'
    BOLD = '\033[1m'
    DIM = '\033[90m'

    def format(self, record: logging.LogRecord) -> str:
        # the same record reaches the file handlers afterwards; colour a copy
        colored = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, '')
        colored.levelname = f"{color}{self.BOLD}{record.levelname}{self.RESET}"
        colored.name = f"{self.DIM}{record.name}{self.RESET}"
        return super().format(colored)


def get_log_level(level_str: Optional[str] = None) -> int:
    """Numeric level for ``level_str``, or for ``settings.log_level``. Unknown names mean INFO."""
    level_str = level_str or get_settings().log_level
    return _LEVELS.get(level_str.upper(), logging.INFO)


def _rotating(path: Path, formatter: str, level: str) -> dict:
    return {
        'class': 'logging.handlers.RotatingFileHandler',
        'filename': str(path),
        'maxBytes': _ROTATE_BYTES,
        'backupCount': 5,
        'formatter': formatter,
        'level': level,
    }


def build_logging_config(log_dir: Path, debug: bool, level: int) -> dict:
    """Build the dictConfig mapping used by setup_logging()."""
    loggers = {
        '': {'handlers': ['console', 'file'], 'level': 'DEBUG', 'propagate': False},
        'gitlearn': {'handlers': ['console', 'file', 'error_file'], 'level': 'DEBUG', 'propagate': False},
    }
    for name, (lib_level, handlers) in _LIBRARY_LOGGERS.items():
        loggers[name] = {'handlers': handlers, 'level': lib_level, 'propagate': False}

    return {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'json': {'()': JSONFormatter},
            'colored': {
                '()': ColoredFormatter,
                'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
            'file': {
                'format': '%(asctime)s | %(levelname)-8s | %(name)-32s | %(funcName)-20s:%(lineno)-4d | %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'colored' if debug else 'json',
                'stream': sys.stdout,
                'level': level,
            },
            'file': _rotating(log_dir / 'gitlearn.log', 'file', 'DEBUG'),
            'error_file': _rotating(log_dir / 'error.log', 'json', 'ERROR'),
        },
        'loggers': loggers,
    }


def setup_logging() -> None:
    """Create the log directory and apply the logging config."""
    settings = get_settings()

    log_dir = Path(settings.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(build_logging_config(log_dir, settings.debug, get_log_level()))

    logging.getLogger('gitlearn.logging').info("Logging system initialized", extra={
        'log_level': settings.log_level,
        'debug': settings.debug,
        'environment': settings.environment,
        'github_api_url': settings.github_api_url,
    })


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name."""
    return logging.getLogger(f"gitlearn.{name}")


def _header(scope, name: bytes) -> Optional[str]:
    for key, value in scope.get('headers', ()):
        if key.lower() == name:
            return value.decode('latin-1')
    return None


class LoggingMiddleware:
    """ASGI middleware logging each request and its response.

    The GitHub login header is logged so remote failures can be tied to a
    repository; the bearer token never is.
    """

    _ids = itertools.count(1)

    def __init__(self, app, logger_name: str = "http"):
        self.app = app
        self.logger = get_logger(logger_name)

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        started = datetime.now(timezone.utc)
        request_id = next(self._ids)
        base = {
            'request_id': request_id,
            'method': scope['method'],
            'path': scope['path'],
            'github_login': _header(scope, b'x-github-login'),
        }

        def elapsed_ms() -> float:
            return round((datetime.now(timezone.utc) - started).total_seconds() * 1000, 2)

        self.logger.info("HTTP Request", extra={
            **base,
            'query_string': scope.get('query_string', b'').decode(),
            'client_ip': scope['client'][0] if scope.get('client') else 'unknown',
        })

        async def send_wrapper(message):
            if message["type"] == "http.response.start":
                self.logger.info("HTTP Response", extra={
                    **base,
                    'status_code': message.get('status', 0),
                    'duration_ms': elapsed_ms(),
                })
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception as exc:
            self.logger.error("HTTP Request Failed", extra={
                **base,
                'duration_ms': elapsed_ms(),
                'exception_type': type(exc).__name__,
                'exception_message': str(exc),
            })
            raise

# src/pytrips/utils/logger.py
import functools
import logging
import sys
import time
from logging.handlers import TimedRotatingFileHandler
from typing import Optional, Union

from ..config.settings import config

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] [%(classname)s] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'
LOG_FILENAME = "app.log"


class SafeFormatter(logging.Formatter):
    """Completa `classname` para registros emitidos fuera de un adapter."""

    default_classname = "pytrips"

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "classname"):
            record.classname = self.default_classname
        return super().format(record)


class ColoredFormatter(SafeFormatter):
    """Solo consola."""

    LEVEL_COLORS = {
        logging.DEBUG: '\033[36m',
        logging.INFO: '\033[32m',
        logging.WARNING: '\033[33m',
        logging.ERROR: '\033[31m',
        logging.CRITICAL: '\033[1;31m',
    }
    RESET = '\033[0m'

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        message = super().format(record)
        return f"{color}{message}{self.RESET}" if color else message


class ClassLoggerAdapter(logging.LoggerAdapter):
    """Inyecta el nombre del componente (SessionChecker, DiscoveryEngine, ...)."""

    def process(self, msg, kwargs):
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("classname", self.extra["classname"])
        kwargs["extra"] = extra
        return msg, kwargs


def resolve_level() -> int:
    if config.DEBUG or config.VERBOSE:
        return logging.DEBUG
    level = logging.getLevelName(str(config.LOG_LEVEL or "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str = "pytrips",
               classname: Optional[str] = None) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Logger del paquete configurado una sola vez; con `classname` devuelve un adapter."""
    base = logging.getLogger(name)
    if not base.handlers:
        _configure_logger(base)

    if classname:
        return ClassLoggerAdapter(base, {"classname": classname})
    return base


def _use_color() -> bool:
    return config.FORCE_COLOR or (config.DEBUG and sys.stdout.isatty())


def _console_handler() -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    formatter_cls = ColoredFormatter if _use_color() else SafeFormatter
    handler.setFormatter(formatter_cls(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler() -> Optional[logging.Handler]:
    """Rotación diaria en BASE_DIR/logs; None si el directorio no es escribible."""
    try:
        handler = TimedRotatingFileHandler(
            filename=config.get_log_path() / LOG_FILENAME,
            when="midnight",
            backupCount=config.LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        print(f"⚠️ Log a archivo deshabilitado: {exc}", file=sys.stderr)
        return None

    handler.suffix = "%Y-%m-%d"
    handler.setFormatter(SafeFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _configure_logger(base: logging.Logger) -> None:
    base.setLevel(resolve_level())
    base.propagate = False
    base.addHandler(_console_handler())

    file_handler = _file_handler()
    if file_handler is not None:
        base.addHandler(file_handler)


logger = get_logger()


def log_execution(func):
    """
    Traza entrada, salida y duración cuando VERBOSE está activo.
    Las excepciones se registran con traceback y se propagan.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        current_logger = getattr(args[0], "logger", logger) if args else logger
        name = func.__qualname__

        if config.VERBOSE:
            current_logger.debug(f"➡️  {name} (args={len(args)}, kwargs={sorted(kwargs)})")
        started = time.perf_counter()

        try:
            result = func(*args, **kwargs)
        except Exception as e:
            current_logger.error(f"❌ {name} falló: {e}", exc_info=True)
            raise

        if config.VERBOSE:
            elapsed = (time.perf_counter() - started) * 1000
            current_logger.debug(f"⬅️  {name} -> {type(result).__name__} en {elapsed:.0f} ms")
        return result

    return wrapper

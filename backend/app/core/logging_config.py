"""
Unified logging configuration with structured JSON logging, request context and masking
"""
import json
import logging
import re
import sys
from contextvars import ContextVar
from logging.handlers import TimedRotatingFileHandler
from typing import Any, Dict, List, Optional

from app.core.config import get_settings

# Context variables for request context
request_context: ContextVar[Dict[str, Any]] = ContextVar('request_context', default={})

_RESERVED_RECORD_KEYS = frozenset([
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'message', 'pathname', 'process',
    'processName', 'relativeCreated', 'thread', 'threadName', 'exc_info',
    'exc_text', 'stack_info', 'taskName',
])


class SensitiveDataFilter(logging.Filter):
    """Filter to mask sensitive data in log messages"""

    SENSITIVE_PATTERNS = [
        # credentials embedded in URLs, e.g. error-tracking DSNs
        (r'(https?://)[^:@/\s]+(:[^@/\s]*)?@', r'\1***@'),
        (r'dsn["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', r'dsn": "***"'),
        (r'token["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', r'token": "***"'),
        (r'secret["\']?\s*[:=]\s*["\']?([^"\'\s&]+)', r'secret": "***"'),
        (r'Bearer\s+([^\s"]+)', r'Bearer ***'),
    ]

    def __init__(self, enabled: bool = True):
        super().__init__()
        self.enabled = enabled

    def _mask(self, text: str) -> str:
        for pattern, replacement in self.SENSITIVE_PATTERNS:
            text = re.sub(pattern, replacement, text, flags=re.IGNORECASE)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        """Filter and mask sensitive data"""
        if not self.enabled:
            return True

        if isinstance(record.msg, str):
            record.msg = self._mask(record.msg)

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


class ContextualFormatter(logging.Formatter):
    """JSON formatter that merges request context and `extra=` fields"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""
        log_dict = {
            'timestamp': self.formatTime(record, self.datefmt),
            'level': record.levelname,
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'message': record.getMessage(),
        }

        ctx = request_context.get({})
        if ctx:
            log_dict.update(ctx)

        if record.exc_info:
            log_dict['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS or key in log_dict:
                continue
            try:
                json.dumps(value, default=str)
                log_dict[key] = value
            except (TypeError, ValueError):
                log_dict[key] = str(value)

        return json.dumps(log_dict, ensure_ascii=False, default=str)


class LoggingConfig:
    """Centralized logging configuration with structured logging support"""

    _configured = False
    _log_metrics: Dict[str, int] = dict.fromkeys(
        ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'), 0
    )

    @staticmethod
    def _module_levels(settings, overrides: Optional[Dict[str, str]]) -> Dict[str, str]:
        levels = {
            "uvicorn.access": "INFO" if settings.log_uvicorn_access else "WARNING",
            "uvicorn.error": "INFO",
            # SSR calls go through httpx; failures are reported by the gateway itself
            "httpx": "WARNING",
            "app": settings.log_level,
            "root": settings.log_level,
        }
        if settings.log_module_levels:
            try:
                custom_levels = json.loads(settings.log_module_levels)
            except (json.JSONDecodeError, TypeError):
                custom_levels = None
            if isinstance(custom_levels, dict):
                levels.update(custom_levels)
            else:
                print(
                    f"LOG_MODULE_LEVELS is not a JSON object, ignoring: {settings.log_module_levels!r}",
                    file=sys.stderr,
                )
        if overrides:
            levels.update(overrides)
        return levels

    @staticmethod
    def _handlers(settings) -> List[logging.Handler]:
        if settings.log_format.lower() == "json":
            formatter = ContextualFormatter(datefmt='%Y-%m-%d %H:%M:%S')
        else:
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )

        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

        if settings.log_file_enabled:
            log_path = settings.resolve_path(settings.log_file_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(TimedRotatingFileHandler(
                filename=str(log_path),
                when='midnight',
                backupCount=settings.log_file_retention,
                encoding='utf-8'
            ))

        sensitive_filter = SensitiveDataFilter(enabled=not settings.log_sensitive_data)
        for handler in handlers:
            handler.setFormatter(formatter)
            handler.addFilter(sensitive_filter)
        return handlers

    @classmethod
    def configure(cls, module_levels: Optional[Dict[str, str]] = None):
        """Configure logging for the application"""
        if cls._configured:
            return

        settings = get_settings()
        levels = cls._module_levels(settings, module_levels)

        logging.basicConfig(
            level=getattr(logging, levels.pop("root").upper(), logging.INFO),
            handlers=cls._handlers(settings),
            force=True
        )
        for module, level in levels.items():
            logging.getLogger(module).setLevel(getattr(logging, level.upper(), logging.INFO))

        metrics_handler = cls._MetricsHandler()
        metrics_handler.setLevel(logging.DEBUG)
        logging.getLogger().addHandler(metrics_handler)

        cls._configured = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a logger for a module"""
        if not cls._configured:
            cls.configure()
        return logging.getLogger(name)

    @classmethod
    def set_context(cls, **kwargs):
        """Set context variables for logging"""
        ctx = request_context.get({}).copy()
        ctx.update(kwargs)
        request_context.set(ctx)

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        return request_context.get({}).copy()

    @classmethod
    def clear_context(cls):
        request_context.set({})

    @classmethod
    def get_metrics(cls) -> Dict[str, int]:
        """Log record counts by level since start (or the last reset)"""
        return cls._log_metrics.copy()

    @classmethod
    def reset_metrics(cls):
        cls._log_metrics = dict.fromkeys(cls._log_metrics, 0)

    class _MetricsHandler(logging.Handler):
        def emit(self, record: logging.LogRecord):
            if record.levelname in LoggingConfig._log_metrics:
                LoggingConfig._log_metrics[record.levelname] += 1


# Initialize on import
LoggingConfig.configure()

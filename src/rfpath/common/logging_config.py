"""
Structured logging for rfpath

Engine modules log through logging.getLogger(__name__), which places them
under the "rfpath" logger. The pipeline, the elevation client and the CLI
use ServiceLogger so every record carries its component and, once bound,
the station pair under analysis. Handlers write to stderr; stdout belongs
to command output.
"""

import logging
import sys
import json
from datetime import datetime, timezone
from typing import Dict, Any, Optional
from pathlib import Path

from .config import LoggingConfig
from .exceptions import InvalidInputError

ROOT_LOGGER = "rfpath"
TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Attributes every LogRecord has; anything else arrived through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with extra fields copied through."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, timezone.utc)
            .isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        for key, value in record.__dict__.items():
            if key not in _RECORD_ATTRS and key not in entry:
                entry[key] = value

        if record.exc_info:
            entry['exception'] = self.formatException(record.exc_info)

        # Paths, enums and numpy scalars fall back to str
        return json.dumps(entry, default=str)


def _parse_level(log_level: str) -> int:
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        raise InvalidInputError(f"Unknown log level: {log_level!r}")
    return level


def setup_logging(
    service_name: str = ROOT_LOGGER,
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    json_format: bool = True
) -> logging.Logger:
    """
    Attach stderr (and optionally file) handlers to a logger

    Calling it again replaces the handlers rather than stacking them.

    Args:
        service_name: Logger to configure
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case)
        log_file: Optional log file; parent directories are created
        json_format: JSONFormatter when True, plain text otherwise

    Returns:
        The configured logger

    Raises:
        InvalidInputError: Unknown log level
    """
    level = _parse_level(log_level)
    formatter = JSONFormatter() if json_format else logging.Formatter(TEXT_FORMAT)

    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger(service_name)
    logger.setLevel(level)
    logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger


def configure_logging(config: LoggingConfig, level_override: Optional[str] = None) -> logging.Logger:
    """Set up the rfpath logger from the logging section of the configuration."""
    return setup_logging(
        ROOT_LOGGER,
        log_level=level_override or config.level,
        log_file=config.log_file,
        json_format=config.json_format,
    )


class ServiceLogger:
    """
    Logger wrapper that stamps service, component and bound context
    onto every record
    """

    def __init__(self, service_name: str = ROOT_LOGGER, component: str = None, **context: Any):
        """
        Args:
            service_name: Logger name
            component: Component within rfpath (elevation, path_analysis, cli)
            **context: Fields added to every record
        """
        self.logger = logging.getLogger(service_name)
        self.service_name = service_name
        self.component = component
        self.context = context

    def bind(self, **context: Any) -> 'ServiceLogger':
        """Copy of this logger with additional fixed fields."""
        return ServiceLogger(self.service_name, self.component, **{**self.context, **context})

    def _add_context(self, extra: Dict[str, Any] = None) -> Dict[str, Any]:
        context = {'service': self.service_name}
        if self.component:
            context['component'] = self.component
        context.update(self.context)
        if extra:
            context.update(extra)
        return context

    def debug(self, message: str, extra: Dict[str, Any] = None):
        self.logger.debug(message, extra=self._add_context(extra))

    def info(self, message: str, extra: Dict[str, Any] = None):
        self.logger.info(message, extra=self._add_context(extra))

    def warning(self, message: str, extra: Dict[str, Any] = None):
        self.logger.warning(message, extra=self._add_context(extra))

    def error(self, message: str, extra: Dict[str, Any] = None, exc_info: bool = False):
        self.logger.error(message, extra=self._add_context(extra), exc_info=exc_info)

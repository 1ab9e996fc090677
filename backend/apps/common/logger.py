import logging
from typing import Any, Dict, Optional


class AppLogger(logging.LoggerAdapter):
    """Logger adapter that renders bound and per-call context as ``key=value`` pairs.

    ``bind`` never mutates the receiver, so module-level loggers can be
    specialised per service or per call without leaking context.
    """

    def __init__(
        self,
        name: str,
        context: Optional[Dict[str, Any]] = None,
        _logger: Optional[logging.Logger] = None,
    ):
        super().__init__(_logger or logging.getLogger(name), dict(context or {}))

    @property
    def context(self) -> Dict[str, Any]:
        return dict(self.extra)

    def bind(self, **extra: Any) -> "AppLogger":
        return AppLogger(self.logger.name, {**self.extra, **extra}, _logger=self.logger)

    def log(self, level: int, msg: Any, *args: Any, **kwargs: Any) -> None:
        # Keyword arguments that logging itself understands pass through;
        # everything else is treated as context for this single record.
        passthrough = {
            key: kwargs.pop(key)
            for key in ("exc_info", "stack_info", "stacklevel")
            if key in kwargs
        }
        if not self.isEnabledFor(level):
            return
        payload = {**self.extra, **kwargs}
        self.logger.log(level, self._format(str(msg), payload), *args, **passthrough)

    def debug(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: Any, *args: Any, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: Any, *args: Any, exc_info: Any = True, **kwargs: Any) -> None:
        self.log(logging.ERROR, msg, *args, exc_info=exc_info, **kwargs)

    @staticmethod
    def _format(message: str, context: Dict[str, Any]) -> str:
        if not context:
            return message
        rendered = " ".join(
            f"{key}={AppLogger._stringify(value)}" for key, value in context.items()
        )
        return f"{message} | {rendered}"

    @staticmethod
    def _stringify(value: Any) -> str:
        if isinstance(value, (str, int, float, bool)) or value is None:
            return str(value)
        return repr(value)


def get_logger(name: str) -> AppLogger:
    return AppLogger(name)

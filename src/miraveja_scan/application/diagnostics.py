import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Diagnostics:
    """Forwards decision lines to the package logger and an optional sink.

    Attributes:
        _sink: Single argument callback receiving every line, if configured.
    """

    def __init__(self, sink: Optional[Callable[[str], None]] = None) -> None:
        self._sink = sink

    def log(self, message: str) -> None:
        logger.debug(message)
        if self._sink is not None:
            self._sink(message)

    def error(self, message: str) -> None:
        logger.error(message)
        if self._sink is not None:
            self._sink(message)

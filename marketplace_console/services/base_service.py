"""
Base Service Class.

Services catch store failures at their boundary and hand the UI a
``ServiceResult`` instead of an exception; ``_failed`` is that single path.
"""

from __future__ import annotations

from marketplace_console.logger import StructuredLogger
from marketplace_console.models.service_models import ServiceResult


class BaseService:
    """Holds the injected logger and builds failure results."""

    def __init__(self, logger: StructuredLogger) -> None:
        self._logger: StructuredLogger = logger

    def _failed(self, action: str, exc: BaseException, status_code: int = 500) -> ServiceResult:
        """Log *exc* with its traceback and wrap it as a failed result.

        *action* reads as a gerund phrase, e.g. ``"loading pricing plans"``.
        """
        self._logger.error("Failed %s: %s", action, exc, exc_info=True)
        return ServiceResult(success=False, error=f"Error {action}: {exc}", status_code=status_code)

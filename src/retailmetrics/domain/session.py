"""Report request tracking."""

import logging
from typing import Any, Callable, Generic, Optional, TypeVar

from retailmetrics.domain.errors import ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReportSession(Generic[T]):
    """Keeps the result of the latest report request only.

    Every request gets a generation number. A result is applied only when it
    belongs to the most recent request, so a slow answer to an older request
    can never overwrite a newer one. Nothing is cached between requests.
    """

    def __init__(self, loader: Callable[[Any], T]):
        """Initialize report session.

        Args:
            loader: Callable computing a report from request parameters
        """
        self._loader = loader
        self._generation = 0
        self._params: Any = None
        self.result: Optional[T] = None

    @property
    def generation(self) -> int:
        return self._generation

    def request(self, params: Any) -> int:
        """Register a new request and return its generation number."""
        self._generation += 1
        self._params = params
        return self._generation

    def resolve(self, generation: int, result: T) -> bool:
        """Apply a result if its request is still the latest one.

        Returns:
            True if the result was applied, False if it was discarded
        """
        if generation != self._generation:
            logger.debug(
                "Discarding result of request %d, request %d is newer",
                generation,
                self._generation,
            )
            return False
        self.result = result
        return True

    def load(self, params: Any) -> Optional[T]:
        """Request a report and apply it when it is still current."""
        generation = self.request(params)
        result = self._loader(params)
        self.resolve(generation, result)
        return self.result

    def refresh(self) -> Optional[T]:
        """Re-run the last request.

        Raises:
            ValidationError: If nothing has been requested yet
        """
        if self._generation == 0:
            raise ValidationError("No report has been requested yet")
        return self.load(self._params)

"""Error taxonomy and failure-context utilities."""

import logging
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional

logger = logging.getLogger(__name__)


class SmoothingError(ValueError):
    """Base class for smoothing and hyperparameter-search failures."""

    def __init__(self, message: str, candidate: Any = None):
        super().__init__(message)
        self.candidate = candidate


class InvalidWindowError(SmoothingError):
    """Moving-average window is nonsensical relative to the series length."""


class InvalidAlphaError(SmoothingError):
    """Decay parameter lies outside the open unit interval."""


class EmptySeriesError(SmoothingError):
    """Input series has zero length."""


class InsufficientDataError(SmoothingError):
    """Not enough rows remain to form the requested folds."""


class InvalidSliceError(SmoothingError):
    """Slice specification is malformed or slices overlap."""


@contextmanager
def candidate_context(parameter: str, candidate: Any) -> Iterator[None]:
    """
    Tag any SmoothingError escaping the block with the candidate being evaluated.

    The exception is logged and re-raised unchanged apart from its
    ``candidate`` attribute, so a grid search fails fast and the caller can
    see which hyperparameter value broke it.

    Args:
        parameter: Name of the hyperparameter (e.g. 'window', 'alpha')
        candidate: Candidate value under evaluation
    """
    try:
        yield
    except SmoothingError as e:
        if e.candidate is None:
            e.candidate = candidate
        logger.error(
            f"Grid search failed for {parameter}={candidate}: "
            f"{type(e).__name__}: {e}",
            extra={"props": {"parameter": parameter, "candidate": candidate}},
        )
        raise


@dataclass
class FailureContext:
    """Captures a failed candidate evaluation for debugging."""
    parameter: str
    candidate: Any = None
    timestamp: float = field(default_factory=time.time)
    exception_type: str = ""
    exception_message: str = ""
    stack_trace: str = ""

    @classmethod
    def from_exception(
        cls,
        parameter: str,
        exc: Exception,
        candidate: Optional[Any] = None,
    ) -> "FailureContext":
        """
        Create context from an exception.

        The candidate defaults to the one recorded on a SmoothingError.
        """
        if candidate is None:
            candidate = getattr(exc, "candidate", None)

        return cls(
            parameter=parameter,
            candidate=candidate,
            exception_type=type(exc).__name__,
            exception_message=str(exc),
            stack_trace="".join(traceback.format_tb(exc.__traceback__)),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "parameter": self.parameter,
            "candidate": self.candidate,
            "timestamp": self.timestamp,
            "exception_type": self.exception_type,
            "exception_message": self.exception_message,
            "stack_trace": self.stack_trace,
        }

"""
Engine errors.

Parse failures and missing data never raise; they resolve to defaults inside
the fact gatherer. What remains is the property not existing and the storage
layer failing, plus the per-item record a batch recompute collects.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from propmetrics.calculations.models import CalculatedMetrics, PropertyFinancialFacts


class MetricsEngineError(Exception):
    pass


class StorageError(MetricsEngineError):
    """Raised by a repository when a read or write fails."""


class PropertyNotFoundError(MetricsEngineError):
    def __init__(self, property_id: str):
        super().__init__(f"Property {property_id} not found")
        self.property_id = property_id


class PersistenceError(MetricsEngineError):
    """
    Write-back failed after the metrics were calculated.

    The metrics are attached so callers can retry the write (or show the
    result) without recomputing.
    """

    def __init__(
        self,
        property_id: str,
        metrics: CalculatedMetrics,
        reason: str = "",
        facts: Optional[PropertyFinancialFacts] = None,
    ):
        message = f"Failed to persist metrics for property {property_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.property_id = property_id
        self.metrics = metrics
        self.facts = facts


@dataclass(frozen=True)
class BatchItemError:
    """One property that failed during a batch recompute."""

    property_id: str
    error_type: str
    message: str

    @classmethod
    def from_exception(cls, property_id: str, exc: Exception) -> "BatchItemError":
        return cls(property_id=property_id, error_type=type(exc).__name__, message=str(exc))


@dataclass(frozen=True)
class BatchResult:
    """Summary of a batch recompute."""

    succeeded: Tuple[str, ...] = ()
    errors: Tuple[BatchItemError, ...] = ()

    @property
    def total(self) -> int:
        return len(self.succeeded) + len(self.errors)

    def error_for(self, property_id: str) -> Optional[BatchItemError]:
        for error in self.errors:
            if error.property_id == property_id:
                return error
        return None

"""
Legacy Deal Blob

Older properties carry their underwriting as a free-form JSON document
("deal analyzer data") instead of rows in the normalized tables. This module
parses that document once into a typed, read-only view. A blob that is not
valid JSON, is not an object, or does not fit the expected shape is treated as
absent rather than as an error.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from propmetrics.calculations.parsing import parse_flag, parse_number

logger = logging.getLogger(__name__)

SUPPORTED_BLOB_VERSIONS = {1}


def _optional_number(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_number(value)


def _number_map(value: Any) -> Dict[str, float]:
    """Accept {"name": amount} or [{"name"/"category": ..., "amount": ...}]."""
    if value is None:
        return {}
    if isinstance(value, list):
        result: Dict[str, float] = {}
        for index, item in enumerate(value):
            if not isinstance(item, dict):
                raise ValueError("cost entries must be objects")
            key = str(item.get("name") or item.get("category") or index)
            result[key] = result.get(key, 0.0) + parse_number(
                item.get("amount", item.get("annualAmount"))
            )
        return result
    if isinstance(value, dict):
        return {str(k): parse_number(v) for k, v in value.items()}
    raise ValueError("expected an object or a list")


class _BlobModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class LegacyAssumptions(_BlobModel):
    """Assumption values; None means the blob did not set them."""

    purchase_price: Optional[float] = None
    vacancy_rate: Optional[float] = None
    expense_ratio: Optional[float] = None
    management_fee: Optional[float] = None
    loan_percentage: Optional[float] = None
    interest_rate: Optional[float] = None
    loan_term_years: Optional[float] = None
    market_cap_rate: Optional[float] = None
    exit_cap_rate: Optional[float] = None
    refinance_ltv: Optional[float] = Field(default=None, alias="refinanceLTV")
    refinance_interest_rate: Optional[float] = None

    @field_validator("*", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> Optional[float]:
        return _optional_number(v)


class LegacyRentRollUnit(_BlobModel):
    unit: Optional[str] = None
    current_rent: float = 0.0
    market_rent: float = 0.0
    rent: float = 0.0
    tenant_name: Optional[str] = None
    lease_start: Optional[str] = None
    lease_end: Optional[str] = None

    @field_validator("current_rent", "market_rent", "rent", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> float:
        return parse_number(v)

    @field_validator("unit", "tenant_name", "lease_start", "lease_end", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @property
    def monthly_rent(self) -> float:
        return self.current_rent or self.market_rent or self.rent


class LegacyUnitType(_BlobModel):
    name: Optional[str] = None
    units: Optional[float] = None
    count: Optional[float] = None
    market_rent: float = 0.0
    rent: float = 0.0

    @field_validator("name", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("units", "count", mode="before")
    @classmethod
    def _counts(cls, v: Any) -> Optional[float]:
        return _optional_number(v)

    @field_validator("market_rent", "rent", mode="before")
    @classmethod
    def _numbers(cls, v: Any) -> float:
        return parse_number(v)

    @property
    def monthly_rent(self) -> float:
        unit_count = self.units if self.units is not None else self.count
        if unit_count is None:
            unit_count = 1
        return unit_count * (self.market_rent or self.rent)


class LegacyLoan(_BlobModel):
    amount: float = 0.0
    interest_rate: Optional[float] = None  # None when the blob leaves it out
    term_years: float = 0.0
    monthly_payment: float = 0.0
    current_balance: float = 0.0
    payment_type: str = "amortizing"
    is_active: bool = False

    @field_validator(
        "amount",
        "term_years",
        "monthly_payment",
        "current_balance",
        mode="before",
    )
    @classmethod
    def _numbers(cls, v: Any) -> float:
        return parse_number(v)

    @field_validator("interest_rate", mode="before")
    @classmethod
    def _rate(cls, v: Any) -> Optional[float]:
        return _optional_number(v)

    @field_validator("payment_type", mode="before")
    @classmethod
    def _payment_type(cls, v: Any) -> str:
        return str(v) if v else "amortizing"

    @field_validator("is_active", mode="before")
    @classmethod
    def _flag(cls, v: Any) -> bool:
        return parse_flag(v)


class DealAnalyzerData(_BlobModel):
    """Typed view of the legacy deal blob."""

    version: int = 1
    assumptions: LegacyAssumptions = Field(default_factory=LegacyAssumptions)
    rent_roll: List[LegacyRentRollUnit] = Field(default_factory=list)
    unit_types: List[LegacyUnitType] = Field(default_factory=list)
    expenses: Dict[str, float] = Field(default_factory=dict)  # monthly amounts
    other_income: Dict[str, float] = Field(default_factory=dict)  # annual amounts
    loans: List[LegacyLoan] = Field(default_factory=list)
    closing_costs: Dict[str, float] = Field(default_factory=dict)
    holding_costs: Dict[str, float] = Field(default_factory=dict)

    @field_validator(
        "expenses", "other_income", "closing_costs", "holding_costs", mode="before"
    )
    @classmethod
    def _maps(cls, v: Any) -> Dict[str, float]:
        return _number_map(v)

    @field_validator("assumptions", mode="before")
    @classmethod
    def _assumptions(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("rent_roll", "unit_types", "loans", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> Any:
        return [] if v is None else v


def parse_deal_blob(raw: Any) -> Optional[DealAnalyzerData]:
    """
    Parse the legacy deal blob.

    Args:
        raw: JSON text, an already-decoded dict, or None

    Returns:
        DealAnalyzerData, or None when the blob is missing or malformed
    """
    if raw is None:
        return None

    data = raw
    if isinstance(raw, (str, bytes)):
        if not raw.strip():
            return None
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring legacy deal blob: not valid JSON")
            return None

    if not isinstance(data, dict):
        logger.warning("Ignoring legacy deal blob: expected a JSON object")
        return None

    try:
        blob = DealAnalyzerData.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Ignoring legacy deal blob: {e.error_count()} invalid fields")
        return None

    if blob.version not in SUPPORTED_BLOB_VERSIONS:
        logger.warning(f"Ignoring legacy deal blob: unsupported version {blob.version}")
        return None

    return blob

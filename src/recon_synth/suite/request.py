"""Generation request model and its validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any

from recon_synth.domain.core import CaseType, DateRange, Direction
from recon_synth.exceptions import RequestValidationError

# camelCase keys accepted from the JSON request contract
_COMPANY_KEY_ALIASES = {
    "bankName": "bank_name",
    "vatId": "vat_id",
}
_COMPANY_FIELDS = ("name", "address", "phone", "email", "website", "bank_name", "iban", "vat_id")


@dataclass(frozen=True)
class CaseRequest:
    """How many cases of one type to generate. Order in the request is preserved."""

    case_type: CaseType
    quantity: int


@dataclass(frozen=True)
class GenerationRequest:
    cases: tuple[CaseRequest, ...]
    date_range: DateRange | None
    direction: Direction = Direction.PAYABLES
    # Partial override of the own company (customer for payables, supplier for receivables)
    own_company: dict[str, str] = field(default_factory=dict)

    def validate(self) -> DateRange:
        """
        Reject the request before any generation begins.

        Returns:
            The validated date range

        Raises:
            RequestValidationError: If the case list is empty, a quantity is
                negative, or the date range is missing or reversed
        """
        if not self.cases:
            raise RequestValidationError("No test cases specified")
        for case in self.cases:
            if case.quantity < 0:
                raise RequestValidationError(
                    f"Quantity for {case.case_type.value} cannot be negative: {case.quantity}"
                )
        if self.date_range is None:
            raise RequestValidationError("Date range is required")
        if self.date_range.end < self.date_range.start:
            raise RequestValidationError(
                f"Date range end {self.date_range.end} is before start {self.date_range.start}"
            )
        return self.date_range

    @property
    def total_quantity(self) -> int:
        return sum(case.quantity for case in self.cases)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GenerationRequest:
        """
        Parse the JSON request contract:

            {"cases": [{"type": "perfect_match", "quantity": 3}, ...],
             "direction": "payables",
             "dateRange": {"start": "2024-01-01", "end": "2024-03-31"},
             "myCompany": {"name": "...", "vatId": "..."}}

        Structural problems raise RequestValidationError; call validate() for
        the semantic checks.
        """
        _expect(data, dict, "Request")
        raw_cases = data.get("cases") or []
        _expect(raw_cases, list, "cases")
        cases = tuple(_parse_case(raw) for raw in raw_cases)

        raw_direction = data.get("direction") or Direction.PAYABLES.value
        try:
            direction = Direction(raw_direction)
        except (TypeError, ValueError):
            raise RequestValidationError(f"Unknown direction: {raw_direction!r}") from None

        raw_range = data.get("dateRange") or data.get("date_range")
        date_range = None
        if raw_range:
            _expect(raw_range, dict, "dateRange")
            if raw_range.get("start") and raw_range.get("end"):
                date_range = DateRange(
                    start=_parse_date(raw_range["start"]),
                    end=_parse_date(raw_range["end"]),
                )

        raw_company = data.get("myCompany") or data.get("customerCompany") or {}
        _expect(raw_company, dict, "myCompany")
        own_company = {}
        for key, value in raw_company.items():
            name = _COMPANY_KEY_ALIASES.get(key, key)
            if name in _COMPANY_FIELDS and value:
                own_company[name] = str(value)

        return cls(
            cases=cases,
            date_range=date_range,
            direction=direction,
            own_company=own_company,
        )


def parse_case_type(value: str) -> CaseType:
    try:
        return CaseType(value)
    except ValueError:
        valid = ", ".join(t.value for t in CaseType)
        raise RequestValidationError(
            f"Unknown case type {value!r}. Valid types: {valid}"
        ) from None


def _expect(value: Any, kind: type, name: str) -> None:
    if not isinstance(value, kind):
        raise RequestValidationError(
            f"{name} must be a JSON {'object' if kind is dict else 'array'}, "
            f"got {type(value).__name__}"
        )


def _parse_case(raw: Any) -> CaseRequest:
    _expect(raw, dict, "Case entry")
    case_type = parse_case_type(raw.get("type", ""))
    try:
        quantity = int(raw.get("quantity", 0))
    except (TypeError, ValueError):
        raise RequestValidationError(
            f"Quantity for {case_type.value} is not an integer: {raw.get('quantity')!r}"
        ) from None
    return CaseRequest(case_type=case_type, quantity=quantity)


def _parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    try:
        # Accept full ISO timestamps by keeping the calendar date
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise RequestValidationError(f"Invalid date: {value!r}") from None

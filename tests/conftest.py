from datetime import date, timedelta
from typing import Any

import numpy as np
import pytest

from recon_synth.config.loader import load_generation_profiles
from recon_synth.domain.core import Company, Invoice, InvoiceItem


class FixedRandom:
    """
    Random source with pinned draws, for exercising exact formulas.

    integers() returns low + int_offset (kept inside the range), uniform()
    returns uniform_value (or the lower bound), random() returns random_value.
    """

    def __init__(
        self,
        uniform_value: float | None = None,
        random_value: float = 0.0,
        int_offset: int = 0,
    ) -> None:
        self.uniform_value = uniform_value
        self.random_value = random_value
        self.int_offset = int_offset

    def integers(self, low: int, high: int) -> int:
        return min(low + self.int_offset, high - 1)

    def uniform(self, low: float, high: float) -> float:
        return low if self.uniform_value is None else self.uniform_value

    def random(self) -> float:
        return self.random_value

    def bytes(self, length: int) -> bytes:
        return b"\x00" * length


@pytest.fixture
def fixed_random() -> type[FixedRandom]:
    return FixedRandom


@pytest.fixture(scope="session")
def config() -> dict[str, Any]:
    return load_generation_profiles()


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


def _company(name: str, variations: frozenset[str] = frozenset()) -> Company:
    return Company(
        name=name,
        address="Hauptstraße 42, 80331 München",
        phone="+49 89 1234567",
        email="billing@example.de",
        website="www.example.de",
        bank_name="Deutsche Bank AG",
        iban="DE89370400440532013000",
        vat_id="DE123456789",
        name_variations=variations,
    )


@pytest.fixture
def supplier() -> Company:
    return _company(
        "TechSolutions GmbH",
        frozenset({"TECHSOLUTIONS GMBH", "TechSolutions", "TS GmbH"}),
    )


@pytest.fixture
def customer() -> Company:
    return _company("Acme Corporation GmbH")


@pytest.fixture
def make_invoice(supplier: Company, customer: Company):
    """Factory for invoices with a given total, issue date and number."""

    def factory(
        total: float = 1000.0,
        issued: date = date(2024, 3, 1),
        number: str = "BILL-2024-0412",
    ) -> Invoice:
        return Invoice(
            id="00000000-0000-4000-8000-000000000000",
            number=number,
            date=issued,
            due_date=issued + timedelta(days=14),
            supplier=supplier,
            customer=customer,
            items=(InvoiceItem(name="Server Equipment", quantity=1, price=total, tax=0),),
            subtotal=total,
            tax_total=0.0,
            total=total,
        )

    return factory

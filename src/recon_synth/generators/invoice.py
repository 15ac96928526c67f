"""Invoice synthesizer: line items, dates and totals for one invoice."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from recon_synth.domain.core import Company, DateRange, Invoice, InvoiceItem
from recon_synth.generators.random_source import (
    RandomSource,
    pick,
    randint,
    random_uuid,
    uniform_2dp,
)

logger = logging.getLogger(__name__)

# Payment terms in days after the issue date
DUE_DAYS_RANGE = (14, 30)
ITEM_COUNT_RANGE = (1, 5)
QUANTITY_RANGE = (1, 10)
PRICE_FACTOR_RANGE = (0.8, 1.2)
GENERATED_BASE_PRICE_RANGE = (50, 5000)

CATALOG_PROBABILITY = 0.7
STANDARD_TAX_RATE = 19  # German VAT; the alternative is exempt (0)

CURRENCY = "EUR"


@dataclass(frozen=True)
class CatalogProduct:
    name: str
    base_price: float
    category: str


def format_invoice_number(prefix: str, year: int, sequence: int) -> str:
    """e.g. ("INV", 2024, 7) -> "INV-2024-0007"."""
    return f"{prefix}-{year}-{sequence:04d}"


def compute_totals(items: tuple[InvoiceItem, ...]) -> tuple[float, float, float]:
    """
    Returns (subtotal, tax_total, total).

    Each figure is rounded to 2 decimals independently from the unrounded
    sums, so total can differ from subtotal + tax_total by 0.01.
    """
    subtotal = 0.0
    tax_total = 0.0
    for item in items:
        item_subtotal = item.quantity * item.price
        subtotal += item_subtotal
        tax_total += item_subtotal * item.tax / 100
    return round(subtotal, 2), round(tax_total, 2), round(subtotal + tax_total, 2)


class InvoiceSynthesizer:
    """Builds invoices with items drawn from the catalog or generated templates."""

    def __init__(self, config: dict[str, Any], rng: RandomSource) -> None:
        self.rng = rng
        self.catalog = [CatalogProduct(**p) for p in config.get("product_catalog", [])]
        self.templates: dict[str, dict[str, list[str]]] = config.get(
            "product_templates", {}
        )
        if not self.catalog and not self.templates:
            raise ValueError("Generation config has neither product_catalog nor product_templates")
        self.note: str = config.get("invoice_note", "")

    def _generated_product(self) -> CatalogProduct:
        category = pick(self.rng, sorted(self.templates))
        words = self.templates[category]
        name = f"{pick(self.rng, words['adjectives'])} {pick(self.rng, words['nouns'])}"
        base_price = randint(self.rng, *GENERATED_BASE_PRICE_RANGE)
        return CatalogProduct(name=name, base_price=base_price, category=category)

    def _draw_product(self) -> CatalogProduct:
        use_catalog = float(self.rng.random()) < CATALOG_PROBABILITY
        if (use_catalog and self.catalog) or not self.templates:
            return pick(self.rng, self.catalog)
        return self._generated_product()

    def generate_items(self, count: int) -> tuple[InvoiceItem, ...]:
        items = []
        for _ in range(count):
            product = self._draw_product()
            quantity = randint(self.rng, *QUANTITY_RANGE)
            factor = uniform_2dp(self.rng, *PRICE_FACTOR_RANGE)
            price = round(product.base_price * factor, 2)
            tax = 0 if randint(self.rng, 0, 2) == 0 else STANDARD_TAX_RATE
            items.append(InvoiceItem(name=product.name, quantity=quantity, price=price, tax=tax))
        return tuple(items)

    def synthesize(
        self,
        date_range: DateRange,
        supplier: Company,
        customer: Company,
        sequence: int,
        prefix: str = "INV",
    ) -> Invoice:
        """
        Build one invoice issued within the date range.

        Args:
            date_range: Inclusive range for the issue date
            supplier: Company issuing the invoice
            customer: Company being billed
            sequence: Run-level invoice sequence number
            prefix: "INV" for receivables, "BILL" for payables

        Returns:
            The invoice with totals computed
        """
        issue_date = date_range.start + timedelta(days=randint(self.rng, 0, date_range.span_days))
        due_date = issue_date + timedelta(days=randint(self.rng, *DUE_DAYS_RANGE))

        items = self.generate_items(randint(self.rng, *ITEM_COUNT_RANGE))
        subtotal, tax_total, total = compute_totals(items)

        invoice = Invoice(
            id=random_uuid(self.rng),
            number=format_invoice_number(prefix, issue_date.year, sequence),
            date=issue_date,
            due_date=due_date,
            supplier=supplier,
            customer=customer,
            items=items,
            subtotal=subtotal,
            tax_total=tax_total,
            total=total,
            currency=CURRENCY,
            note=self.note,
        )
        logger.debug(
            "Synthesized %s: %d items, total %.2f %s",
            invoice.number,
            len(items),
            total,
            CURRENCY,
        )
        return invoice

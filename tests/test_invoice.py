"""Tests for the invoice synthesizer."""

import re
from datetime import date, timedelta

import numpy as np
import pytest

from recon_synth.domain.core import Company, DateRange, InvoiceItem
from recon_synth.generators.invoice import (
    InvoiceSynthesizer,
    compute_totals,
    format_invoice_number,
)


@pytest.fixture
def date_range() -> DateRange:
    return DateRange(start=date(2024, 1, 1), end=date(2024, 3, 31))


def test_format_invoice_number() -> None:
    assert format_invoice_number("INV", 2024, 7) == "INV-2024-0007"
    assert format_invoice_number("BILL", 2025, 412) == "BILL-2025-0412"


def test_compute_totals() -> None:
    items = (
        InvoiceItem(name="IT Consulting Services", quantity=2, price=10.0, tax=19),
        InvoiceItem(name="Domain Registration (per year)", quantity=1, price=5.55, tax=0),
    )
    subtotal, tax_total, total = compute_totals(items)
    assert subtotal == pytest.approx(25.55)
    assert tax_total == pytest.approx(3.8)
    assert total == pytest.approx(29.35)


def test_item_validation() -> None:
    with pytest.raises(ValueError):
        InvoiceItem(name="x", quantity=0, price=1.0, tax=0)
    with pytest.raises(ValueError):
        InvoiceItem(name="x", quantity=1, price=-1.0, tax=0)


class TestInvoiceSynthesizer:
    def test_invoice_invariants(
        self, config, rng, date_range: DateRange, supplier: Company, customer: Company
    ) -> None:
        synthesizer = InvoiceSynthesizer(config, rng)
        for seq in range(100, 300):
            invoice = synthesizer.synthesize(date_range, supplier, customer, seq, prefix="BILL")

            assert date_range.start <= invoice.date <= date_range.end
            assert 14 <= (invoice.due_date - invoice.date).days <= 30
            assert 1 <= len(invoice.items) <= 5
            for item in invoice.items:
                assert 1 <= item.quantity <= 10
                assert item.tax in (0, 19)
                assert round(item.price, 2) == item.price
                assert 0 < item.price <= 5000 * 1.2

            assert round(invoice.total, 2) == invoice.total
            assert round(invoice.subtotal, 2) == invoice.subtotal
            assert round(invoice.tax_total, 2) == invoice.tax_total
            assert abs(invoice.subtotal + invoice.tax_total - invoice.total) <= 0.01 + 1e-9

            assert invoice.number == f"BILL-{invoice.date.year}-{seq:04d}"
            assert invoice.currency == "EUR"
            assert invoice.supplier is supplier and invoice.customer is customer

    def test_totals_match_items(self, config, rng, date_range, supplier, customer) -> None:
        invoice = InvoiceSynthesizer(config, rng).synthesize(date_range, supplier, customer, 1)
        assert (invoice.subtotal, invoice.tax_total, invoice.total) == compute_totals(
            invoice.items
        )
        assert re.fullmatch(r"INV-\d{4}-0001", invoice.number)

    def test_single_day_range(self, config, rng, supplier, customer) -> None:
        day = date(2024, 2, 29)
        invoice = InvoiceSynthesizer(config, rng).synthesize(
            DateRange(day, day), supplier, customer, 5
        )
        assert invoice.date == day
        assert invoice.due_date >= day + timedelta(days=14)

    def test_catalog_and_generated_products(
        self, config, date_range, supplier, customer
    ) -> None:
        synthesizer = InvoiceSynthesizer(config, np.random.default_rng(7))
        catalog_names = {p["name"] for p in config["product_catalog"]}
        names = [
            item.name
            for seq in range(200)
            for item in synthesizer.synthesize(date_range, supplier, customer, seq).items
        ]
        from_catalog = sum(name in catalog_names for name in names) / len(names)
        assert 0.6 < from_catalog < 0.8

    def test_tax_exempt_share(self, config, date_range, supplier, customer) -> None:
        synthesizer = InvoiceSynthesizer(config, np.random.default_rng(9))
        rates = [
            item.tax
            for seq in range(300)
            for item in synthesizer.synthesize(date_range, supplier, customer, seq).items
        ]
        assert 0.25 < rates.count(0) / len(rates) < 0.42

    def test_requires_products(self, rng) -> None:
        with pytest.raises(ValueError):
            InvoiceSynthesizer({}, rng)

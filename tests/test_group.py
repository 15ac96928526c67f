"""Tests for the group-payment aggregator."""

from datetime import date, timedelta

import numpy as np
import pytest

from recon_synth.cases.group import aggregate_payment, generate_group_payment
from recon_synth.domain.core import DateRange, Direction
from recon_synth.generators.invoice import InvoiceSynthesizer


def test_concrete_three_invoice_batch(make_invoice, fixed_random) -> None:
    invoices = (
        make_invoice(total=1000.00, issued=date(2024, 2, 1), number="BILL-2024-0500"),
        make_invoice(total=1500.50, issued=date(2024, 2, 9), number="BILL-2024-0501"),
        make_invoice(total=999.49, issued=date(2024, 2, 5), number="BILL-2024-0502"),
    )
    transaction, metadata = aggregate_payment(
        invoices, "TECHSOLUTIONS GMBH", Direction.PAYABLES, fixed_random()
    )
    assert transaction.amount_eur == pytest.approx(-3499.99)
    assert metadata.original_amount == 3499.99
    assert metadata.grouped_invoice_count == 3
    assert metadata.adjustment_reason == "Group payment covering 3 invoices"
    assert transaction.description == (
        "Batch Payment: BILL-2024-0500, BILL-2024-0501, BILL-2024-0502"
    )
    # Earliest possible payment date is the day after the latest invoice
    assert transaction.date == date(2024, 2, 10)
    assert metadata.matching_fields == (
        "counterparty",
        "total_amount",
        "invoice_numbers",
        "date_proximity",
    )
    assert metadata.mismatched_fields == ()


def test_receivables_batch_is_positive(make_invoice, rng) -> None:
    invoices = (make_invoice(total=10.0), make_invoice(total=20.0))
    transaction, _ = aggregate_payment(invoices, "ACME", Direction.RECEIVABLES, rng)
    assert transaction.amount_eur == 30.0


def test_single_invoice_is_rejected(make_invoice, rng) -> None:
    with pytest.raises(ValueError):
        aggregate_payment((make_invoice(),), "ACME", Direction.PAYABLES, rng)


@pytest.mark.parametrize("direction", list(Direction))
def test_generated_groups(config, supplier, customer, direction) -> None:
    rng = np.random.default_rng(17)
    synthesizer = InvoiceSynthesizer(config, rng)
    date_range = DateRange(date(2024, 5, 1), date(2024, 5, 31))
    sizes = set()
    for first in range(100, 600, 10):
        group = generate_group_payment(
            synthesizer, supplier, customer, direction, date_range, first, rng
        )
        n = len(group.invoices)
        sizes.add(n)
        assert 2 <= n <= 3
        assert group.consumed == n
        assert group.metadata.grouped_invoice_count == n

        prefix = direction.invoice_prefix
        assert [inv.number for inv in group.invoices] == [
            f"{prefix}-{inv.date.year}-{first + i:04d}" for i, inv in enumerate(group.invoices)
        ]

        # The generated party sits on the counterparty side for both directions
        for inv in group.invoices:
            if direction is Direction.PAYABLES:
                assert inv.supplier is supplier and inv.customer is customer
            else:
                assert inv.supplier is customer and inv.customer is supplier
            assert date_range.start <= inv.date <= date_range.end

        latest = max(inv.date for inv in group.invoices)
        assert latest + timedelta(days=1) <= group.transaction.date <= latest + timedelta(days=7)

        expected = round(sum(inv.total for inv in group.invoices), 2)
        assert abs(group.transaction.amount_eur) == expected
        assert (group.transaction.amount_eur > 0) == (direction is Direction.RECEIVABLES)
    assert sizes == {2, 3}

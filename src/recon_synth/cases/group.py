"""Group-payment aggregator: one transaction settling several invoices."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta

from recon_synth.domain.core import (
    BankTransaction,
    CaseMetadata,
    Company,
    DateRange,
    Direction,
    Invoice,
)
from recon_synth.generators.invoice import InvoiceSynthesizer
from recon_synth.generators.party import random_name_variation
from recon_synth.generators.random_source import RandomSource, randint

logger = logging.getLogger(__name__)

GROUP_SIZE_RANGE = (2, 3)
PAYMENT_OFFSET_DAYS = (1, 7)

GROUP_MATCHING_FIELDS = ("counterparty", "total_amount", "invoice_numbers", "date_proximity")


@dataclass(frozen=True)
class GroupPayment:
    invoices: tuple[Invoice, ...]
    transaction: BankTransaction
    metadata: CaseMetadata

    @property
    def consumed(self) -> int:
        """Number of invoice sequence numbers the group used."""
        return len(self.invoices)


def aggregate_payment(
    invoices: tuple[Invoice, ...],
    counterparty: str,
    direction: Direction,
    rng: RandomSource,
) -> tuple[BankTransaction, CaseMetadata]:
    """Build the single transaction and metadata covering all given invoices."""
    if len(invoices) < 2:
        raise ValueError(f"A group payment needs at least 2 invoices, got {len(invoices)}")

    latest = max(inv.date for inv in invoices)
    transaction_date = latest + timedelta(days=randint(rng, *PAYMENT_OFFSET_DAYS))
    # Rounded once on the sum, not per invoice
    total = round(sum(inv.total for inv in invoices), 2)
    n = len(invoices)

    transaction = BankTransaction(
        date=transaction_date,
        counterparty=counterparty,
        description="Batch Payment: " + ", ".join(inv.number for inv in invoices),
        amount_eur=direction.sign * total,
    )
    metadata = CaseMetadata(
        original_amount=total,
        adjusted_amount=total,
        matching_fields=GROUP_MATCHING_FIELDS,
        mismatched_fields=(),
        adjustment_reason=f"Group payment covering {n} invoices",
        grouped_invoice_count=n,
    )
    return transaction, metadata


def generate_group_payment(
    synthesizer: InvoiceSynthesizer,
    party: Company,
    own_company: Company,
    direction: Direction,
    date_range: DateRange,
    first_sequence: int,
    rng: RandomSource,
) -> GroupPayment:
    """
    Generate 2-3 invoices between one counterparty and the own company, with
    consecutive sequence numbers, and the batch transaction settling them.
    """
    n = randint(rng, *GROUP_SIZE_RANGE)
    if direction is Direction.PAYABLES:
        supplier, customer = party, own_company
    else:
        supplier, customer = own_company, party

    invoices = tuple(
        synthesizer.synthesize(
            date_range,
            supplier,
            customer,
            first_sequence + i,
            prefix=direction.invoice_prefix,
        )
        for i in range(n)
    )
    counterparty = random_name_variation(party, rng)
    transaction, metadata = aggregate_payment(invoices, counterparty, direction, rng)

    logger.debug(
        "Group payment %s covering %d invoices: %.2f",
        transaction.description,
        n,
        transaction.amount_eur,
    )
    return GroupPayment(invoices=invoices, transaction=transaction, metadata=metadata)

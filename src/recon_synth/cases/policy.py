"""
Case-type policy engine.

Maps (invoice, case type, direction) to the bank transaction that should be
reconciled against the invoice, plus metadata describing which matching
signals the case keeps intact and which it deliberately breaks.

Each simple case type is one declarative CasePolicy row:

    case type                      offset   magnitude
    perfect_match                  1-7      total
    discount_{1,2,3}_percent       1-5      total x (1 - k%)
    fx_gain / fx_loss              3-14     total x rate   (payables)
                                            total x (2 - rate) (receivables)
    partial_match_no_description   1-10     total          generic description
    partial_match_amount_mismatch  1-10     total x [0.99, 1.01]
    partial_match_date_far         30-60    total

For receivables the FX rate is mirrored around 1 so that a "gain" still means
the own company ends up better off once money flows in instead of out.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import timedelta

from recon_synth.domain.core import (
    BankTransaction,
    CaseMetadata,
    CaseType,
    Direction,
    Invoice,
)
from recon_synth.generators.party import random_name_variation
from recon_synth.generators.random_source import RandomSource, pick, randint, uniform_2dp

# Field tags
COUNTERPARTY = "counterparty"
AMOUNT = "amount"
INVOICE_NUMBER = "invoice_number"
DATE_PROXIMITY = "date_proximity"

FX_GAIN_RATE_RANGE = (0.95, 0.99)
FX_LOSS_RATE_RANGE = (1.01, 1.05)
AMOUNT_MISMATCH_FACTOR_RANGE = (0.99, 1.01)
MIN_AMOUNT_STEP = 0.01


@dataclass(frozen=True)
class AmountAdjustment:
    magnitude: float
    fx_rate: float | None = None


AmountRule = Callable[[float, Direction, RandomSource], AmountAdjustment]


def unchanged(total: float, direction: Direction, rng: RandomSource) -> AmountAdjustment:
    return AmountAdjustment(total)


def scaled_by(factor: float) -> AmountRule:
    """Fixed multiplicative adjustment, e.g. an early-payment discount."""

    def rule(total: float, direction: Direction, rng: RandomSource) -> AmountAdjustment:
        return AmountAdjustment(round(total * factor, 2))

    return rule


def fx_rate_between(low: float, high: float) -> AmountRule:
    """Conversion at a rate drawn from [low, high], mirrored for receivables."""

    def rule(total: float, direction: Direction, rng: RandomSource) -> AmountAdjustment:
        rate = uniform_2dp(rng, low, high)
        multiplier = rate if direction is Direction.PAYABLES else 2 - rate
        return AmountAdjustment(round(total * multiplier, 2), fx_rate=rate)

    return rule


def random_factor_between(low: float, high: float) -> AmountRule:
    """
    Small unexplained deviation (fees, rounding on the payer's side).

    The factor is drawn at full precision. When the scaled amount still rounds
    to the invoice total, it is moved by one cent, so the amount always differs.
    """

    def rule(total: float, direction: Direction, rng: RandomSource) -> AmountAdjustment:
        factor = float(rng.uniform(low, high))
        magnitude = round(total * factor, 2)
        if magnitude == round(total, 2):
            # Never go below one cent
            if factor >= 1 or total <= MIN_AMOUNT_STEP:
                magnitude = round(total + MIN_AMOUNT_STEP, 2)
            else:
                magnitude = round(total - MIN_AMOUNT_STEP, 2)
        return AmountAdjustment(magnitude)

    return rule


@dataclass(frozen=True)
class CasePolicy:
    """Everything that distinguishes one simple case type from another."""

    offset_days: tuple[int, int]
    amount_rule: AmountRule
    # None means: draw a generic phrase without the invoice number
    description_template: str | None
    matching_fields: tuple[str, ...]
    mismatched_fields: tuple[str, ...] = ()
    # May reference {rate}
    adjustment_reason: str | None = None
    discount_percent: int | None = None

    def describe(self, invoice: Invoice, rng: RandomSource, generic: Sequence[str]) -> str:
        if self.description_template is None:
            return pick(rng, generic)
        return self.description_template.format(number=invoice.number)


def _discount_policy(percent: int, factor: float) -> CasePolicy:
    return CasePolicy(
        offset_days=(1, 5),
        amount_rule=scaled_by(factor),
        description_template=f"{{number}} Payment {percent}% early discount",
        matching_fields=(COUNTERPARTY, INVOICE_NUMBER, DATE_PROXIMITY),
        mismatched_fields=(f"{AMOUNT} ({percent}% discount)",),
        adjustment_reason=f"{percent}% early payment discount",
        discount_percent=percent,
    )


CASE_POLICIES: dict[CaseType, CasePolicy] = {
    CaseType.PERFECT_MATCH: CasePolicy(
        offset_days=(1, 7),
        amount_rule=unchanged,
        description_template="{number} Payment",
        matching_fields=(COUNTERPARTY, AMOUNT, INVOICE_NUMBER, DATE_PROXIMITY),
    ),
    CaseType.DISCOUNT_1_PERCENT: _discount_policy(1, 0.99),
    CaseType.DISCOUNT_2_PERCENT: _discount_policy(2, 0.98),
    CaseType.DISCOUNT_3_PERCENT: _discount_policy(3, 0.97),
    CaseType.FX_GAIN: CasePolicy(
        offset_days=(3, 14),
        amount_rule=fx_rate_between(*FX_GAIN_RATE_RANGE),
        description_template="{number} FX Payment",
        matching_fields=(COUNTERPARTY, INVOICE_NUMBER),
        mismatched_fields=(f"{AMOUNT} (FX gain)",),
        adjustment_reason="FX gain (rate: {rate:.4f})",
    ),
    CaseType.FX_LOSS: CasePolicy(
        offset_days=(3, 14),
        amount_rule=fx_rate_between(*FX_LOSS_RATE_RANGE),
        description_template="{number} FX Payment",
        matching_fields=(COUNTERPARTY, INVOICE_NUMBER),
        mismatched_fields=(f"{AMOUNT} (FX loss)",),
        adjustment_reason="FX loss (rate: {rate:.4f})",
    ),
    CaseType.PARTIAL_MATCH_NO_DESCRIPTION: CasePolicy(
        offset_days=(1, 10),
        amount_rule=unchanged,
        description_template=None,
        matching_fields=(COUNTERPARTY, AMOUNT, DATE_PROXIMITY),
        mismatched_fields=("description (no invoice number)",),
    ),
    CaseType.PARTIAL_MATCH_AMOUNT_MISMATCH: CasePolicy(
        offset_days=(1, 10),
        amount_rule=random_factor_between(*AMOUNT_MISMATCH_FACTOR_RANGE),
        description_template="{number} Payment",
        matching_fields=(COUNTERPARTY, INVOICE_NUMBER, DATE_PROXIMITY),
        mismatched_fields=(f"{AMOUNT} (small unexplained difference)",),
        adjustment_reason="Unknown amount difference (possible fees or rounding)",
    ),
    CaseType.PARTIAL_MATCH_DATE_FAR: CasePolicy(
        offset_days=(30, 60),
        amount_rule=unchanged,
        description_template="{number} Late Payment",
        matching_fields=(COUNTERPARTY, AMOUNT, INVOICE_NUMBER),
        mismatched_fields=("date (30+ days after invoice)",),
    ),
}


def policy_for(case_type: CaseType) -> CasePolicy:
    try:
        return CASE_POLICIES[case_type]
    except KeyError:
        raise ValueError(
            f"{case_type.value} has no single-invoice policy; "
            "group payments are built by the group aggregator"
        ) from None


def apply_policy(
    invoice: Invoice,
    case_type: CaseType,
    direction: Direction,
    rng: RandomSource,
    generic_descriptions: Sequence[str],
) -> tuple[BankTransaction, CaseMetadata]:
    """
    Derive the bank transaction and case metadata for one invoice.

    Args:
        invoice: The invoice the transaction settles
        case_type: Any simple (non-group) case type
        direction: Payables yields negative amounts, receivables positive
        rng: Random source for offsets, rates and counterparty text
        generic_descriptions: Phrase pool for cases without an invoice number

    Returns:
        (transaction, metadata)
    """
    policy = policy_for(case_type)

    transaction_date = invoice.date + timedelta(days=randint(rng, *policy.offset_days))
    adjustment = policy.amount_rule(invoice.total, direction, rng)

    party = invoice.supplier if direction is Direction.PAYABLES else invoice.customer
    counterparty = random_name_variation(party, rng)
    description = policy.describe(invoice, rng, generic_descriptions)

    reason = policy.adjustment_reason
    if reason is not None and adjustment.fx_rate is not None:
        reason = reason.format(rate=adjustment.fx_rate)

    transaction = BankTransaction(
        date=transaction_date,
        counterparty=counterparty,
        description=description,
        amount_eur=direction.sign * adjustment.magnitude,
    )
    metadata = CaseMetadata(
        original_amount=invoice.total,
        adjusted_amount=adjustment.magnitude,
        matching_fields=policy.matching_fields,
        mismatched_fields=policy.mismatched_fields,
        adjustment_reason=reason,
        discount_percent=policy.discount_percent,
        fx_rate=adjustment.fx_rate,
    )
    return transaction, metadata

import enum
from dataclasses import dataclass, field
from datetime import date, datetime


class Direction(enum.Enum):
    PAYABLES = "payables"  # Own company pays a counterparty, money out
    RECEIVABLES = "receivables"  # A counterparty pays the own company, money in

    @property
    def sign(self) -> int:
        """Sign applied to transaction magnitudes."""
        return -1 if self is Direction.PAYABLES else 1

    @property
    def invoice_prefix(self) -> str:
        return "BILL" if self is Direction.PAYABLES else "INV"


class CaseType(enum.Enum):
    PERFECT_MATCH = "perfect_match"
    DISCOUNT_1_PERCENT = "discount_1_percent"
    DISCOUNT_2_PERCENT = "discount_2_percent"
    DISCOUNT_3_PERCENT = "discount_3_percent"
    FX_GAIN = "fx_gain"
    FX_LOSS = "fx_loss"
    PARTIAL_MATCH_NO_DESCRIPTION = "partial_match_no_description"
    PARTIAL_MATCH_AMOUNT_MISMATCH = "partial_match_amount_mismatch"
    PARTIAL_MATCH_DATE_FAR = "partial_match_date_far"
    GROUP_PAYMENT = "group_payment"  # Handled by the group aggregator


@dataclass(frozen=True)
class CaseTypeInfo:
    label: str
    description: str


CASE_TYPE_INFO: dict[CaseType, CaseTypeInfo] = {
    CaseType.PERFECT_MATCH: CaseTypeInfo(
        "Perfect Match",
        "Transaction perfectly matches invoice (same counterparty, amount, "
        "date close by, invoice number in description)",
    ),
    CaseType.DISCOUNT_1_PERCENT: CaseTypeInfo(
        "1% Early Payment Discount",
        "Transaction amount is 1% less due to early payment discount",
    ),
    CaseType.DISCOUNT_2_PERCENT: CaseTypeInfo(
        "2% Early Payment Discount",
        "Transaction amount is 2% less due to early payment discount",
    ),
    CaseType.DISCOUNT_3_PERCENT: CaseTypeInfo(
        "3% Early Payment Discount",
        "Transaction amount is 3% less due to early payment discount",
    ),
    CaseType.FX_GAIN: CaseTypeInfo(
        "FX Gain",
        "Foreign exchange conversion was favorable to the own company",
    ),
    CaseType.FX_LOSS: CaseTypeInfo(
        "FX Loss",
        "Foreign exchange conversion was unfavorable to the own company",
    ),
    CaseType.PARTIAL_MATCH_NO_DESCRIPTION: CaseTypeInfo(
        "Partial Match - Missing Description",
        "Transaction matches but description is generic (no invoice number)",
    ),
    CaseType.PARTIAL_MATCH_AMOUNT_MISMATCH: CaseTypeInfo(
        "Partial Match - Amount Mismatch",
        "Small unexplained amount difference (rounding, fees)",
    ),
    CaseType.PARTIAL_MATCH_DATE_FAR: CaseTypeInfo(
        "Partial Match - Date Far Apart",
        "Transaction date is unusually far from invoice date (30+ days)",
    ),
    CaseType.GROUP_PAYMENT: CaseTypeInfo(
        "Group Payment",
        "Single transaction covering 2-3 invoices from the same supplier/customer",
    ),
}


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range invoices are issued in."""

    start: date
    end: date

    @property
    def span_days(self) -> int:
        """Number of whole days between start and end."""
        return (self.end - self.start).days


@dataclass(frozen=True)
class Company:
    """
    A party appearing on invoices, either the own company or a counterparty.

    name_variations holds alternate surface forms of the name as it might
    appear on a bank statement. It is computed once when the company is
    created.
    """

    name: str
    address: str
    phone: str
    email: str
    website: str
    bank_name: str
    iban: str
    vat_id: str
    name_variations: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Company name cannot be empty")


@dataclass(frozen=True)
class InvoiceItem:
    name: str
    quantity: int
    price: float
    tax: int  # Percent, 0 or 19

    @property
    def subtotal(self) -> float:
        """Unrounded line amount before tax."""
        return self.quantity * self.price

    def __post_init__(self) -> None:
        if self.quantity <= 0:
            raise ValueError(f"Item quantity must be positive, got {self.quantity}")
        if self.price < 0:
            raise ValueError(f"Item price cannot be negative, got {self.price}")


@dataclass(frozen=True)
class Invoice:
    """
    A single invoice with precomputed totals.

    subtotal, tax_total and total are each rounded to 2 decimals on their own,
    so total may differ from subtotal + tax_total by up to 0.01.
    """

    id: str
    number: str
    date: date
    due_date: date
    supplier: Company
    customer: Company
    items: tuple[InvoiceItem, ...]
    subtotal: float
    tax_total: float
    total: float
    currency: str = "EUR"
    note: str = ""

    def __post_init__(self) -> None:
        if not self.items:
            raise ValueError(f"Invoice {self.number} must have at least one item")


@dataclass(frozen=True)
class BankTransaction:
    date: date
    counterparty: str
    description: str
    amount_eur: float  # Negative for payables, positive for receivables


@dataclass(frozen=True)
class CaseMetadata:
    """What a test case is engineered to match and where it deliberately diverges."""

    original_amount: float
    adjusted_amount: float
    matching_fields: tuple[str, ...]
    mismatched_fields: tuple[str, ...] = ()
    adjustment_reason: str | None = None
    discount_percent: int | None = None
    fx_rate: float | None = None
    grouped_invoice_count: int | None = None

    def __post_init__(self) -> None:
        overlap = set(self.matching_fields) & set(self.mismatched_fields)
        if overlap:
            raise ValueError(f"Fields both matching and mismatched: {sorted(overlap)}")


@dataclass(frozen=True)
class TestCase:
    """One reconciliation scenario: the invoice(s) and the bank transaction."""

    __test__ = False  # not a pytest class

    id: str
    type: CaseType
    direction: Direction
    invoice: Invoice
    transaction: BankTransaction
    metadata: CaseMetadata
    invoices: tuple[Invoice, ...] | None = None  # Group payments only

    @property
    def all_invoices(self) -> tuple[Invoice, ...]:
        """Every invoice the case covers, primary first."""
        return self.invoices if self.invoices else (self.invoice,)


@dataclass(frozen=True)
class GeneratedTestSuite:
    id: str
    created_at: datetime
    direction: Direction
    cases: tuple[TestCase, ...] = field(default_factory=tuple)
    csv_content: str = ""

"""
Bank-statement CSV serializer.

Format:
    date;counterparty;description;amount_eur
    2024-03-04;TECHSOLUTIONS GMBH;BILL-2024-0412 Payment;-1234.5

One row per test case (a group payment is one row), sorted by date with ties
kept in generation order. Fields are written as-is: a ';' inside a
counterparty or description produces a malformed row, so one is logged as a
warning rather than quoted.
"""

import logging
from collections.abc import Iterable

from recon_synth.domain.core import BankTransaction, GeneratedTestSuite, TestCase
from recon_synth.writers.base import BaseWriter, SuiteData

logger = logging.getLogger(__name__)

DELIMITER = ";"
CSV_HEADER = DELIMITER.join(["date", "counterparty", "description", "amount_eur"])


def format_amount(amount: float) -> str:
    """Shortest decimal form, integral amounts without a fraction: -9800, 4900, -1234.5."""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def format_row(transaction: BankTransaction) -> str:
    for name in ("counterparty", "description"):
        if DELIMITER in getattr(transaction, name):
            logger.warning(
                "Unescaped %r in %s %r; the CSV row will be malformed",
                DELIMITER,
                name,
                getattr(transaction, name),
            )
    return DELIMITER.join(
        [
            transaction.date.isoformat(),
            transaction.counterparty,
            transaction.description,
            format_amount(transaction.amount_eur),
        ]
    )


def render_csv(cases: Iterable[TestCase]) -> str:
    """Render the transactions of all cases as CSV text (no trailing newline)."""
    transactions = [case.transaction for case in cases]
    # sorted() is stable, so same-day rows stay in generation order
    ordered = sorted(transactions, key=lambda t: t.date.isoformat())
    return "\n".join([CSV_HEADER, *(format_row(t) for t in ordered)])


class TransactionCsvWriter(BaseWriter):
    """Writes the bank-statement CSV for a suite, a list of test cases or rendered text."""

    def write(self, data: SuiteData, destination: str) -> None:
        """Write the CSV for data to the destination file."""
        filepath = self.prepare_file(destination)
        if isinstance(data, str):
            content = data
        elif isinstance(data, GeneratedTestSuite):
            content = data.csv_content
        else:
            content = render_csv(data)
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            f.write(content)
        logger.info("Wrote %d transactions to %s", content.count("\n"), filepath)

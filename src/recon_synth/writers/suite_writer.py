"""Suite writer: dumps a generated suite (CSV, JSON, PDF data) to a directory."""

import json
import logging
from pathlib import Path
from typing import Any

from recon_synth.domain.core import (
    BankTransaction,
    CaseMetadata,
    Company,
    GeneratedTestSuite,
    Invoice,
    TestCase,
)
from recon_synth.export.pdf_data import invoice_to_pdf_data
from recon_synth.writers.base import BaseWriter, SuiteData
from recon_synth.writers.csv_writer import TransactionCsvWriter

logger = logging.getLogger(__name__)

CSV_FILENAME = "transactions.csv"
SUITE_FILENAME = "suite.json"
PDF_DATA_DIR = "pdf_data"


def company_to_dict(company: Company) -> dict[str, Any]:
    return {
        "name": company.name,
        "address": company.address,
        "phone": company.phone,
        "email": company.email,
        "website": company.website,
        "bankName": company.bank_name,
        "iban": company.iban,
        "vatId": company.vat_id,
        "nameVariations": sorted(company.name_variations),
    }


def invoice_to_dict(invoice: Invoice) -> dict[str, Any]:
    return {
        "id": invoice.id,
        "number": invoice.number,
        "date": invoice.date.isoformat(),
        "dueDate": invoice.due_date.isoformat(),
        "supplier": company_to_dict(invoice.supplier),
        "customer": company_to_dict(invoice.customer),
        "items": [
            {"name": i.name, "quantity": i.quantity, "price": i.price, "tax": i.tax}
            for i in invoice.items
        ],
        "subtotal": invoice.subtotal,
        "taxTotal": invoice.tax_total,
        "total": invoice.total,
        "currency": invoice.currency,
        "note": invoice.note,
    }


def transaction_to_dict(transaction: BankTransaction) -> dict[str, Any]:
    return {
        "date": transaction.date.isoformat(),
        "counterparty": transaction.counterparty,
        "description": transaction.description,
        "amount_eur": transaction.amount_eur,
    }


def metadata_to_dict(metadata: CaseMetadata) -> dict[str, Any]:
    data: dict[str, Any] = {
        "originalAmount": metadata.original_amount,
        "adjustedAmount": metadata.adjusted_amount,
        "matchingFields": list(metadata.matching_fields),
        "mismatchedFields": list(metadata.mismatched_fields),
    }
    # Optional keys are omitted rather than written as null
    optional = {
        "adjustmentReason": metadata.adjustment_reason,
        "discountPercent": metadata.discount_percent,
        "fxRate": metadata.fx_rate,
        "groupedInvoiceCount": metadata.grouped_invoice_count,
    }
    data.update({k: v for k, v in optional.items() if v is not None})
    return data


def case_to_dict(case: TestCase) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": case.id,
        "type": case.type.value,
        "direction": case.direction.value,
        "invoice": invoice_to_dict(case.invoice),
        "transaction": transaction_to_dict(case.transaction),
        "metadata": metadata_to_dict(case.metadata),
    }
    if case.invoices:
        data["invoices"] = [invoice_to_dict(inv) for inv in case.invoices]
    return data


def suite_to_dict(suite: GeneratedTestSuite) -> dict[str, Any]:
    """The suite in the JSON response shape: {id, createdAt, direction, cases, csvContent}."""
    return {
        "id": suite.id,
        "createdAt": suite.created_at.isoformat(),
        "direction": suite.direction.value,
        "cases": [case_to_dict(case) for case in suite.cases],
        "csvContent": suite.csv_content,
    }


class SuiteWriter(BaseWriter):
    """
    Writes a suite to a directory:

        transactions.csv        bank statement
        suite.json              full suite
        pdf_data/<number>.json  renderer input, one per invoice
    """

    def __init__(self, output_dir: str) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def write(self, data: SuiteData, destination: str) -> None:
        """Write a suite into a subdirectory of the output directory."""
        if not isinstance(data, GeneratedTestSuite):
            raise TypeError(f"Expected GeneratedTestSuite, got {type(data)}")
        self._write_suite(data, self.output_dir / destination)

    def write_suite(self, suite: GeneratedTestSuite) -> Path:
        """Write a suite directly into the output directory and return it."""
        self._write_suite(suite, self.output_dir)
        return self.output_dir

    def _write_suite(self, suite: GeneratedTestSuite, target: Path) -> None:
        pdf_dir = target / PDF_DATA_DIR
        pdf_dir.mkdir(parents=True, exist_ok=True)

        TransactionCsvWriter().write(suite.csv_content, str(target / CSV_FILENAME))

        with open(self.prepare_file(target / SUITE_FILENAME), "w", encoding="utf-8") as f:
            json.dump(suite_to_dict(suite), f, indent=2, ensure_ascii=False)

        n_invoices = 0
        for case in suite.cases:
            for invoice in case.all_invoices:
                with open(pdf_dir / f"{invoice.number}.json", "w", encoding="utf-8") as f:
                    json.dump(invoice_to_pdf_data(invoice), f, indent=2, ensure_ascii=False)
                n_invoices += 1

        logger.info(
            "Wrote suite %s to %s (%d cases, %d invoices)",
            suite.id,
            target,
            len(suite.cases),
            n_invoices,
        )

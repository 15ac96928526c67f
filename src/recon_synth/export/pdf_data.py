"""
PDF-data adapter for the invoice rendering layer.

The renderer consumes one invoice at a time in this shape and returns an
opaque document; layout and rendering are not done here.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict
from typing import Any

from recon_synth.domain.core import Invoice

logger = logging.getLogger(__name__)

PDF_STATUS = "Due"
PDF_LOCALE = "en-US"
QR_WIDTH = 100

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def invoice_number_to_int(number: str) -> int:
    """
    Numeric sequence at the end of an invoice number, e.g. "INV-2024-0412" -> 412.

    The renderer only uses this for display, so a malformed number falls back
    to 0 instead of failing the export.
    """
    match = _TRAILING_DIGITS.search(number)
    if match is None:
        logger.warning("Invoice number %r has no numeric suffix, using 0", number)
        return 0
    return int(match.group(1))


def invoice_to_pdf_data(invoice: Invoice) -> dict[str, Any]:
    """Build the renderer's input document for one invoice. The invoice is not modified."""
    supplier = invoice.supplier
    customer = invoice.customer
    return {
        "company": {
            "logo": "",
            "name": supplier.name,
            "address": supplier.address,
            "phone": supplier.phone,
            "email": supplier.email,
            "website": supplier.website,
            "bank": f"{supplier.bank_name}\nIBAN: {supplier.iban}\nVAT ID: {supplier.vat_id}",
        },
        "customer": {
            "name": customer.name,
            "address": customer.address,
            "phone": customer.phone,
            "email": customer.email,
        },
        "invoice": {
            "number": invoice_number_to_int(invoice.number),
            "date": invoice.date.isoformat(),
            "dueDate": invoice.due_date.isoformat(),
            "status": PDF_STATUS,
            "locale": PDF_LOCALE,
            "currency": invoice.currency,
        },
        "items": [asdict(item) for item in invoice.items],
        "qr": {
            "data": (
                f"Invoice: {invoice.number}\n"
                f"Amount: {invoice.currency} {invoice.total}\n"
                f"IBAN: {supplier.iban}"
            ),
            "width": QR_WIDTH,
        },
        "note": invoice.note,
    }

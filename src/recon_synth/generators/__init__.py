"""Generators module for creating parties and invoices."""

from recon_synth.generators.invoice import InvoiceSynthesizer
from recon_synth.generators.party import CompanyGenerator, random_name_variation

__all__ = [
    "CompanyGenerator",
    "InvoiceSynthesizer",
    "random_name_variation",
]

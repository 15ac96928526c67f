"""Writers module for exporting generated test suites."""

from recon_synth.writers.base import BaseWriter
from recon_synth.writers.csv_writer import TransactionCsvWriter, render_csv
from recon_synth.writers.suite_writer import SuiteWriter, suite_to_dict

__all__ = ["BaseWriter", "SuiteWriter", "TransactionCsvWriter", "render_csv", "suite_to_dict"]

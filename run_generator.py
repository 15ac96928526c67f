"""
Reconciliation Test-Suite Generator Runner.

Usage:
    python run_generator.py --case perfect_match=5 --case group_payment=2 \
        --start 2024-01-01 --end 2024-03-31
    python run_generator.py --request request.json --seed 42
    python run_generator.py --list-case-types
"""

import argparse
import logging
import sys
import time

from recon_synth.config.loader import load_generation_request
from recon_synth.domain.core import CASE_TYPE_INFO, Direction
from recon_synth.exceptions import GenerationError, RequestValidationError
from recon_synth.suite.assembler import generate_test_suite
from recon_synth.suite.request import CaseRequest, GenerationRequest, parse_case_type
from recon_synth.writers.suite_writer import SuiteWriter

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("recon_synth")

# CLI flag -> own-company field
COMPANY_FLAGS = {
    "company_name": "name",
    "company_address": "address",
    "company_iban": "iban",
    "company_vat_id": "vat_id",
    "company_bank": "bank_name",
}


def parse_case_arg(value: str) -> CaseRequest:
    """Parse "TYPE=N" (or just "TYPE" for one case)."""
    type_name, _, quantity = value.partition("=")
    try:
        n = int(quantity) if quantity else 1
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid quantity in {value!r}") from None
    try:
        return CaseRequest(case_type=parse_case_type(type_name), quantity=n)
    except RequestValidationError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reconciliation Test-Suite Generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_generator.py --case discount_2_percent=3 --start 2024-01-01 --end 2024-01-31
  python run_generator.py --direction receivables --case fx_loss=2 --case group_payment=1 \\
      --start 2024-01-01 --end 2024-06-30 --seed 7
        """,
    )
    parser.add_argument(
        "--case",
        dest="cases",
        action="append",
        type=parse_case_arg,
        default=[],
        metavar="TYPE=N",
        help="Case type and quantity; repeat for several types (order is kept)",
    )
    parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=None,
        help="payables (money out, default) or receivables (money in)",
    )
    parser.add_argument("--start", help="First possible invoice date (YYYY-MM-DD)")
    parser.add_argument("--end", help="Last possible invoice date (YYYY-MM-DD)")
    parser.add_argument(
        "--request",
        default=None,
        help="JSON request file; command-line flags override its values",
    )
    parser.add_argument("--seed", type=int, default=None, help="Random seed for a reproducible suite")
    parser.add_argument(
        "--output-dir",
        type=str,
        default="data/output",
        help="Directory for transactions.csv, suite.json and pdf_data/",
    )
    for flag, field_name in COMPANY_FLAGS.items():
        parser.add_argument(
            "--" + flag.replace("_", "-"),
            dest=flag,
            default=None,
            help=f"Override the own company's {field_name.replace('_', ' ')}",
        )
    parser.add_argument(
        "--list-case-types",
        action="store_true",
        help="Print the available case types and exit",
    )
    return parser


def build_request(args: argparse.Namespace) -> GenerationRequest:
    """Merge the optional request file with command-line flags."""
    data = load_generation_request(args.request) if args.request else {}

    if args.cases:
        data["cases"] = [
            {"type": c.case_type.value, "quantity": c.quantity} for c in args.cases
        ]
    if args.direction:
        data["direction"] = args.direction
    # Non-object values are left for from_dict to reject
    date_range = data.get("dateRange") or {}
    if isinstance(date_range, dict):
        date_range = dict(date_range)
        if args.start:
            date_range["start"] = args.start
        if args.end:
            date_range["end"] = args.end
        data["dateRange"] = date_range

    company = data.get("myCompany") or {}
    if isinstance(company, dict):
        company = dict(company)
        for flag, field_name in COMPANY_FLAGS.items():
            if getattr(args, flag):
                company[field_name] = getattr(args, flag)
        data["myCompany"] = company

    return GenerationRequest.from_dict(data)


def main(argv: list[str] | None = None) -> int:
    """Generate a test suite and write it to the output directory."""
    args = build_parser().parse_args(argv)

    if args.list_case_types:
        for case_type, info in CASE_TYPE_INFO.items():
            print(f"{case_type.value:32s} {info.label}: {info.description}")
        return 0

    try:
        request = build_request(args)
        start_time = time.time()
        suite = generate_test_suite(request, seed=args.seed)
    except RequestValidationError as e:
        logger.error("Invalid request: %s", e)
        return 2
    except GenerationError as e:
        logger.error("Generation failed: %s", e)
        return 1

    SuiteWriter(args.output_dir).write_suite(suite)
    logger.info(
        "Suite %s with %d cases generated in %.2f seconds",
        suite.id,
        len(suite.cases),
        time.time() - start_time,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())

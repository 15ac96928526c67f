"""
Suite assembler: turns a generation request into a complete test suite.

Per requested unit:
    simple case -> counterparty -> invoice -> policy engine      (sequence += 1)
    group case  -> counterparty -> 2-3 invoices -> aggregator    (sequence += N)

Cases are emitted in request order, all units of one case type before the
next. A single invoice sequence counter runs across the whole suite, seeded
at a random value in [100, 999] so fixtures do not look sequential.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import numpy as np

from recon_synth.cases.group import generate_group_payment
from recon_synth.cases.policy import apply_policy
from recon_synth.config.loader import load_generation_profiles
from recon_synth.domain.core import (
    CaseType,
    Company,
    DateRange,
    Direction,
    GeneratedTestSuite,
    TestCase,
)
from recon_synth.exceptions import GenerationError
from recon_synth.generators.invoice import InvoiceSynthesizer
from recon_synth.generators.party import CompanyGenerator, build_own_company
from recon_synth.generators.random_source import RandomSource, randint, random_uuid
from recon_synth.suite.request import CaseRequest, GenerationRequest
from recon_synth.writers.csv_writer import render_csv

logger = logging.getLogger(__name__)

SEQUENCE_START_RANGE = (100, 999)


class SuiteAssembler:
    """
    Orchestrates party, invoice, policy and group generation for one request.

    The assembler owns its random source. Share an assembler only within a
    single thread; independent requests should use independent assemblers
    (see generate_test_suite).
    """

    def __init__(
        self,
        config: dict[str, Any] | None = None,
        rng: RandomSource | None = None,
        seed: int | None = None,
    ) -> None:
        self.config = config if config is not None else load_generation_profiles()
        self.rng: RandomSource = rng if rng is not None else np.random.default_rng(seed)
        try:
            self.companies = CompanyGenerator(self.config, self.rng)
            self.synthesizer = InvoiceSynthesizer(self.config, self.rng)
        except ValueError as e:
            raise GenerationError(f"Incomplete generation profiles: {e}") from e
        self.generic_descriptions: list[str] = self.config.get("generic_descriptions", [])

    def own_company(self, overrides: dict[str, str] | None = None) -> Company:
        return build_own_company(self.config.get("default_own_company", {}), overrides)

    def _simple_case(
        self,
        case_type: CaseType,
        direction: Direction,
        date_range: DateRange,
        own: Company,
        sequence: int,
    ) -> TestCase:
        party = self.companies.generate_company()
        if direction is Direction.PAYABLES:
            supplier, customer = party, own
        else:
            supplier, customer = own, party

        invoice = self.synthesizer.synthesize(
            date_range,
            supplier,
            customer,
            sequence,
            prefix=direction.invoice_prefix,
        )
        transaction, metadata = apply_policy(
            invoice, case_type, direction, self.rng, self.generic_descriptions
        )
        return TestCase(
            id=random_uuid(self.rng),
            type=case_type,
            direction=direction,
            invoice=invoice,
            transaction=transaction,
            metadata=metadata,
        )

    def _group_case(
        self,
        direction: Direction,
        date_range: DateRange,
        own: Company,
        sequence: int,
    ) -> tuple[TestCase, int]:
        group = generate_group_payment(
            self.synthesizer,
            self.companies.generate_company(),
            own,
            direction,
            date_range,
            sequence,
            self.rng,
        )
        case = TestCase(
            id=random_uuid(self.rng),
            type=CaseType.GROUP_PAYMENT,
            direction=direction,
            invoice=group.invoices[0],
            invoices=group.invoices,
            transaction=group.transaction,
            metadata=group.metadata,
        )
        return case, group.consumed

    def generate_cases(self, request: GenerationRequest) -> list[TestCase]:
        """
        Generate all cases of a request, in request order.

        Raises:
            RequestValidationError: If the request is rejected; nothing is generated
        """
        date_range = request.validate()

        own = self.own_company(request.own_company)
        direction = request.direction
        sequence = randint(self.rng, *SEQUENCE_START_RANGE)

        cases: list[TestCase] = []
        for case_request in request.cases:
            for _ in range(case_request.quantity):
                if case_request.case_type is CaseType.GROUP_PAYMENT:
                    case, consumed = self._group_case(direction, date_range, own, sequence)
                    sequence += consumed
                else:
                    case = self._simple_case(
                        case_request.case_type, direction, date_range, own, sequence
                    )
                    sequence += 1
                cases.append(case)
            logger.debug(
                "Generated %d x %s", case_request.quantity, case_request.case_type.value
            )
        return cases

    def generate(
        self,
        request: GenerationRequest,
        created_at: datetime | None = None,
    ) -> GeneratedTestSuite:
        """Validate the request and build the complete suite including CSV text."""
        cases = self.generate_cases(request)
        csv_content = render_csv(cases)

        suite = GeneratedTestSuite(
            id=random_uuid(self.rng),
            created_at=created_at or datetime.now(timezone.utc),
            direction=request.direction,
            cases=tuple(cases),
            csv_content=csv_content,
        )
        logger.info(
            "Generated suite %s: %d cases, %d invoices (%s)",
            suite.id,
            len(cases),
            sum(len(c.all_invoices) for c in cases),
            request.direction.value,
        )
        return suite


def build_request(
    cases: list[tuple[CaseType, int]],
    direction: Direction,
    date_range: DateRange | None,
    own_company: dict[str, str] | None = None,
) -> GenerationRequest:
    """Convenience constructor from an ordered list of (case type, quantity)."""
    return GenerationRequest(
        cases=tuple(CaseRequest(case_type=t, quantity=q) for t, q in cases),
        date_range=date_range,
        direction=direction,
        own_company=dict(own_company or {}),
    )


def generate_test_suite(
    request: GenerationRequest,
    seed: int | None = None,
    config: dict[str, Any] | None = None,
    created_at: datetime | None = None,
) -> GeneratedTestSuite:
    """
    Generate one suite with a fresh random source.

    Each call builds its own assembler, so concurrent calls share no state.
    """
    return SuiteAssembler(config=config, seed=seed).generate(request, created_at=created_at)

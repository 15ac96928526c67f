"""Tests for company generation and bank-statement name variations."""

import numpy as np
import pytest

from recon_synth.domain.core import Company
from recon_synth.generators.party import (
    CompanyGenerator,
    build_own_company,
    decamel,
    derive_name_variations,
    initials,
    random_name_variation,
    slugify,
    split_legal_suffix,
    strip_legal_suffix,
)


class TestNameVariations:
    def test_fused_name_with_long_base(self) -> None:
        assert derive_name_variations("TechSolutions", "GmbH") == {
            "TECHSOLUTIONS GMBH",
            "TechSolutions",
            "TECHSOLUTIONS",
            "TS",
            "TS GmbH",
            "Tech Solutions",
            "Tech Solutions GmbH",
            "TECHSOLUTI",
        }

    def test_dotted_suffix_gets_plain_variant(self) -> None:
        variations = derive_name_variations("Nordic Logistics", "B.V.")
        assert "Nordic Logistics BV" in variations
        assert "NL" in variations
        assert "NL B.V." in variations
        assert "NORDIC LOG" in variations
        # Already spaced, so no de-camel-cased duplicate
        assert variations == {
            "NORDIC LOGISTICS B.V.",
            "Nordic Logistics",
            "NORDIC LOGISTICS",
            "NL",
            "NL B.V.",
            "Nordic Logistics BV",
            "NORDIC LOG",
        }

    def test_single_token_has_no_initials(self) -> None:
        variations = derive_name_variations("Rossi", "S.r.l.")
        assert variations == {"ROSSI S.R.L.", "Rossi", "ROSSI", "Rossi Srl"}

    def test_short_base_is_not_truncated(self) -> None:
        assert derive_name_variations("DataPro", "AB") == {
            "DATAPRO AB",
            "DataPro",
            "DATAPRO",
            "DP",
            "DP AB",
            "Data Pro",
            "Data Pro AB",
        }

    def test_canonical_name_not_required(self) -> None:
        assert "TechSolutions GmbH" not in derive_name_variations("TechSolutions", "GmbH")

    def test_helpers(self) -> None:
        assert decamel("CloudServices") == "Cloud Services"
        assert decamel("Nordic Software") == "Nordic Software"
        assert initials("CloudServices") == "CS"
        assert initials("Baltic Office Supplies") == "BOS"


class TestLegalSuffix:
    def test_split_known_suffix(self) -> None:
        assert split_legal_suffix("Acme Corporation GmbH") == ("Acme Corporation", "GmbH")

    def test_longest_suffix_wins(self) -> None:
        assert split_legal_suffix("Schmidt Trading GmbH & Co. KG") == (
            "Schmidt Trading",
            "GmbH & Co. KG",
        )

    def test_case_insensitive(self) -> None:
        assert strip_legal_suffix("DATAPRO SOLUTIONS LTD") == "DATAPRO SOLUTIONS"

    def test_unknown_suffix_unchanged(self) -> None:
        assert split_legal_suffix("Widgets Unlimited") == ("Widgets Unlimited", None)

    def test_bare_suffix_is_not_stripped(self) -> None:
        assert strip_legal_suffix("GmbH") == "GmbH"


class TestRandomNameVariation:
    def test_canonical_when_below_threshold(self, supplier: Company, fixed_random) -> None:
        assert random_name_variation(supplier, fixed_random(random_value=0.1)) == supplier.name

    def test_variation_when_above_threshold(self, supplier: Company, fixed_random) -> None:
        result = random_name_variation(supplier, fixed_random(random_value=0.9))
        assert result in supplier.name_variations

    def test_fallback_transforms_without_variations(self, customer: Company) -> None:
        name = customer.name
        expected = {
            name,
            name.upper(),
            "Acme",
            "Acme Corporation",
            name.replace(".", ""),
        }
        rng = np.random.default_rng(3)
        seen = {random_name_variation(customer, rng) for _ in range(300)}
        assert seen <= expected
        assert name.upper() in seen

    def test_canonical_share_is_about_forty_percent(self, supplier: Company) -> None:
        rng = np.random.default_rng(11)
        draws = [random_name_variation(supplier, rng) for _ in range(4000)]
        share = draws.count(supplier.name) / len(draws)
        assert 0.35 < share < 0.45


class TestCompanyGenerator:
    def test_generated_companies_are_plausible(self, config, rng) -> None:
        generator = CompanyGenerator(config, rng)
        for _ in range(40):
            company = generator.generate_company()
            base, suffix = split_legal_suffix(company.name)
            assert suffix is not None, company.name
            assert company.name_variations == derive_name_variations(base, suffix)
            if len(base) > 10:
                assert base[:10].upper() in company.name_variations
            assert "@" in company.email
            assert company.website.startswith("www.")
            assert company.iban[:2].isalpha()
            assert company.iban[2:].isdigit()
            assert "\n" not in company.address

    def test_country_profile_is_honoured(self, config, rng) -> None:
        company = CompanyGenerator(config, rng).generate_company("NL")
        assert company.iban.startswith("NL")
        assert company.vat_id.startswith("NL") and company.vat_id.endswith("B01")
        assert company.bank_name in config["country_profiles"]["NL"]["banks"]
        assert company.website.endswith(".nl")

    def test_same_seed_same_companies(self, config) -> None:
        a = CompanyGenerator(config, np.random.default_rng(5))
        b = CompanyGenerator(config, np.random.default_rng(5))
        assert [a.generate_company() for _ in range(5)] == [
            b.generate_company() for _ in range(5)
        ]

    def test_requires_country_profiles(self, rng) -> None:
        with pytest.raises(ValueError):
            CompanyGenerator({}, rng)


class TestOwnCompany:
    def test_defaults_with_partial_override(self, config) -> None:
        own = build_own_company(
            config["default_own_company"], {"name": "Widget Works Ltd", "iban": ""}
        )
        assert own.name == "Widget Works Ltd"
        # Empty override values keep the default
        assert own.iban == config["default_own_company"]["iban"]
        assert "WIDGET WORKS LTD" in own.name_variations

    def test_unrecognised_suffix_has_no_variations(self, config) -> None:
        own = build_own_company(config["default_own_company"], {"name": "Widgets"})
        assert own.name_variations == frozenset()


def test_slugify_folds_to_ascii() -> None:
    assert slugify("Müller Consulting") == "muller-consulting"
    assert slugify("***") == "company"

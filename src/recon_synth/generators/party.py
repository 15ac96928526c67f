"""
Party generator: synthetic EU companies and the name variations a bank
statement might show for them.

Structure of a generated name:
    {business name} {legal suffix}
    e.g. "TechSolutions GmbH", "Nordic Logistics AB", "Jansen Consulting B.V."

Business-name templates (chosen uniformly):
    prefix+suffix fusion      -> "DataWorks"
    region + industry phrase  -> "Baltic Office Supplies"
    surname + industry phrase -> "Rossi Engineering"
    prefix+industry fusion    -> "MediLogistics"
"""

from __future__ import annotations

import logging
import re
import unicodedata
from collections.abc import Callable, Mapping
from typing import Any

from faker import Faker

from recon_synth.domain.core import Company
from recon_synth.generators.random_source import RandomSource, pick, randint

logger = logging.getLogger(__name__)

# Probability that a bank statement shows the canonical name unchanged
CANONICAL_NAME_PROBABILITY = 0.4

TRUNCATE_LENGTH = 10

# Suffix tokens recognised when stripping a legal form off a free-text name.
# Longest first so "GmbH & Co. KG" wins over "KG".
KNOWN_LEGAL_SUFFIXES: tuple[str, ...] = tuple(
    sorted(
        {
            "GmbH & Co. KG", "GmbH & Co KG", "GmbH", "AG", "KG", "OG", "e.K.",
            "B.V.", "BV", "N.V.", "NV", "V.O.F.",
            "S.A.", "SA", "SARL", "S.A.S.", "SAS", "SRL",
            "S.p.A.", "SpA", "S.r.l.", "Srl", "S.a.s.",
            "S.L.", "SL", "S.L.U.",
            "Ltd", "Ltd.", "Limited", "PLC", "LLP",
            "AB", "HB", "Oy", "Oyj", "Ky",
            "Inc", "Inc.", "LLC", "Corp", "Corp.", "Co.",
        },
        key=lambda s: (-len(s), s),
    )
)

EMAIL_MAILBOXES = ("billing", "invoices", "accounts", "finance")

_CAMEL_BOUNDARY = re.compile(r"([a-z])([A-Z])")


def decamel(text: str) -> str:
    """Insert a space at every lowercase-then-uppercase boundary."""
    return _CAMEL_BOUNDARY.sub(r"\1 \2", text)


def initials(text: str) -> str:
    """First letter of each capitalised or space-delimited token, uppercased."""
    return "".join(tok[0] for tok in decamel(text).split() if tok[0].isalpha()).upper()


def derive_name_variations(base_name: str, legal_suffix: str) -> frozenset[str]:
    """
    Alternate surface forms of "{base_name} {legal_suffix}".

    The canonical name itself is not guaranteed to be a member.
    """
    full_name = f"{base_name} {legal_suffix}"
    variations = {full_name.upper(), base_name, base_name.upper()}

    abbrev = initials(base_name)
    if len(abbrev) >= 2:
        variations.add(abbrev)
        variations.add(f"{abbrev} {legal_suffix}")

    spaced = decamel(base_name)
    if spaced != base_name:
        variations.add(spaced)
        variations.add(f"{spaced} {legal_suffix}")

    plain_suffix = legal_suffix.replace(".", "")
    if plain_suffix != legal_suffix:
        variations.add(f"{base_name} {plain_suffix}")

    if len(base_name) > TRUNCATE_LENGTH:
        variations.add(base_name[:TRUNCATE_LENGTH].upper())

    return frozenset(variations)


def split_legal_suffix(name: str) -> tuple[str, str | None]:
    """Split a known trailing legal suffix off a name (case-insensitive)."""
    lowered = name.lower()
    for suffix in KNOWN_LEGAL_SUFFIXES:
        if lowered.endswith(" " + suffix.lower()):
            base = name[: -len(suffix)].rstrip(" ,")
            if base:
                return base, name[-len(suffix):]
    return name, None


def strip_legal_suffix(name: str) -> str:
    return split_legal_suffix(name)[0]


def _first_token(name: str) -> str:
    return name.split()[0] if name.split() else name


def _first_two_tokens(name: str) -> str:
    return " ".join(name.split()[:2])


# Fallback transforms for companies without precomputed variations
_AD_HOC_TRANSFORMS: tuple[Callable[[str], str], ...] = (
    str.upper,
    _first_token,
    strip_legal_suffix,
    lambda name: name.replace(".", ""),
    _first_two_tokens,
)


def random_name_variation(company: Company, rng: RandomSource) -> str:
    """
    Pick the counterparty text a bank statement shows for a company.

    Returns the canonical name 40% of the time, otherwise one of the
    precomputed name variations, falling back to an ad-hoc transform when the
    company has none.
    """
    if float(rng.random()) < CANONICAL_NAME_PROBABILITY:
        return company.name
    if company.name_variations:
        # Sorted so that a seeded run is reproducible regardless of hash order
        return pick(rng, sorted(company.name_variations))
    transform = pick(rng, _AD_HOC_TRANSFORMS)
    return transform(company.name)


def slugify(text: str) -> str:
    """ASCII, lowercase, hyphen-separated form of a name for domains."""
    ascii_text = (
        unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    )
    return re.sub(r"[^a-z0-9]+", "-", ascii_text.lower()).strip("-") or "company"


def build_own_company(
    defaults: Mapping[str, Any],
    overrides: Mapping[str, Any] | None = None,
) -> Company:
    """
    Build the caller's own company from config defaults plus partial overrides.

    Name variations are derived when the name ends in a recognised legal
    suffix and left empty otherwise.
    """
    fields = {**defaults, **{k: v for k, v in (overrides or {}).items() if v}}
    base, suffix = split_legal_suffix(fields["name"])
    variations = derive_name_variations(base, suffix) if suffix else frozenset()
    return Company(
        name=fields["name"],
        address=fields.get("address", ""),
        phone=fields.get("phone", ""),
        email=fields.get("email", ""),
        website=fields.get("website", ""),
        bank_name=fields.get("bank_name", ""),
        iban=fields.get("iban", ""),
        vat_id=fields.get("vat_id", ""),
        name_variations=variations,
    )


class CompanyGenerator:
    """Generates counterparty companies from country profiles."""

    def __init__(self, config: dict[str, Any], rng: RandomSource) -> None:
        self.rng = rng
        self.config = config
        self.country_profiles: dict[str, dict[str, Any]] = config.get(
            "country_profiles", {}
        )
        if not self.country_profiles:
            raise ValueError("Generation config has no country_profiles")
        self.name_words: dict[str, list[str]] = config.get("name_words", {})
        self._fakers: dict[str, Faker] = {}

        self._templates: tuple[Callable[[Faker], str], ...] = (
            self._prefix_suffix_name,
            self._region_industry_name,
            self._surname_industry_name,
            self._prefix_industry_name,
        )

    def _faker_for(self, locale: str) -> Faker:
        """One Faker per locale, reseeded per company from the run's source."""
        if locale not in self._fakers:
            self._fakers[locale] = Faker(locale)
        faker = self._fakers[locale]
        faker.seed_instance(randint(self.rng, 0, 2**31 - 1))
        return faker

    # --- Business-name templates ---

    def _prefix_suffix_name(self, faker: Faker) -> str:
        return pick(self.rng, self.name_words["prefixes"]) + pick(
            self.rng, self.name_words["suffixes"]
        )

    def _region_industry_name(self, faker: Faker) -> str:
        region = pick(self.rng, self.name_words["region_words"])
        return f"{region} {pick(self.rng, self.name_words['industry_phrases'])}"

    def _surname_industry_name(self, faker: Faker) -> str:
        surname = faker.last_name()
        return f"{surname} {pick(self.rng, self.name_words['industry_phrases'])}"

    def _prefix_industry_name(self, faker: Faker) -> str:
        industry = pick(self.rng, self.name_words["industry_phrases"]).split()[0]
        return pick(self.rng, self.name_words["prefixes"]) + industry

    def _digits(self, n: int) -> str:
        return "".join(str(randint(self.rng, 0, 9)) for _ in range(n))

    def generate_company(self, country: str | None = None) -> Company:
        """
        Generate one company, from the given country code or a uniformly
        chosen country profile.
        """
        if country is None:
            country = pick(self.rng, sorted(self.country_profiles))
        profile = self.country_profiles[country]
        faker = self._faker_for(profile["locale"])

        template = pick(self.rng, self._templates)
        base_name = template(faker)
        legal_suffix = pick(self.rng, profile["legal_suffixes"])
        name = f"{base_name} {legal_suffix}"

        slug = slugify(base_name)
        tld = profile.get("tld", country.lower())
        company = Company(
            name=name,
            address=faker.address().replace("\n", ", "),
            phone=faker.phone_number(),
            email=f"{pick(self.rng, EMAIL_MAILBOXES)}@{slug}.{tld}",
            website=f"www.{slug}.{tld}",
            bank_name=pick(self.rng, profile["banks"]),
            iban=(
                f"{profile['iban_prefix']}{randint(self.rng, 10, 99)}"
                f"{self._digits(profile['bban_length'])}"
            ),
            vat_id=(
                f"{profile['vat_prefix']}{self._digits(profile['vat_digits'])}"
                f"{profile.get('vat_suffix', '')}"
            ),
            name_variations=derive_name_variations(base_name, legal_suffix),
        )
        logger.debug(
            "Generated company %s (%s) with %d name variations",
            company.name,
            country,
            len(company.name_variations),
        )
        return company

"""
Static Lookup Tables.

Read-only reference data used by the noise corrector, identifier decoder
and field resolvers:
    - Manufacturer identifier prefixes (WMI) → manufacturer
    - Model-year codes (VIN position 10) → year
    - Corrupted manufacturer tokens → canonical manufacturer
    - Canonical manufacturer names, longest first
    - Per-manufacturer submodel reconstruction rules
    - Per-manufacturer model OCR corrections
    - Trailing OCR artifact tokens

All tables are built once at import and exposed as MappingProxyType or
tuple objects. Components receive them through a LookupTables instance
rather than importing the module constants directly.

Author: ML Engineering Team
"""

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Mapping, Tuple


@dataclass(frozen=True)
class SubmodelRule:
    """
    Reconstruction rule for performance submodels.

    A single digit found next to one of ``keywords`` is turned into
    ``marker + digit`` (BMW "3 | Competition" → "M3").

    Attributes:
        marker: Prefix placed before the digit.
        keywords: Trim or package keywords that qualify the digit.
    """
    marker: str
    keywords: Tuple[str, ...]


MANUFACTURER_PREFIXES: Mapping[str, str] = MappingProxyType({
    '1FT': 'Ford',
    '3FA': 'Ford',
    '1GC': 'Chevrolet',
    '1GM': 'Chevrolet',
    '1G1': 'Chevrolet',
    '2G1': 'Chevrolet',
    '1G4': 'Buick',
    '1HD': 'Harley-Davidson',
    '2C3': 'Chrysler',
    '2C4': 'Chrysler',
    '2T1': 'Toyota',
    '4T1': 'Toyota',
    'JT': 'Toyota',
    '3VW': 'Volkswagen',
    'WVW': 'Volkswagen',
    '5YJ': 'Tesla',
    'JHM': 'Honda',
    'JH4': 'Acura',
    'JN1': 'Nissan',
    'KMH': 'Hyundai',
    '5XY': 'Hyundai',
    'KN': 'Kia',
    'WBA': 'BMW',
    'WBS': 'BMW',
    'WBY': 'BMW',
    'WDD': 'Mercedes-Benz',
    'WDB': 'Mercedes-Benz',
    'YV1': 'Volvo',
    'SAL': 'Land Rover',
    'SAJ': 'Jaguar',
    'JF': 'Subaru',
    'JM': 'Mazda',
    'WP': 'Porsche',
})

# Position-10 codes for the 2001-2030 cycle; the cycle repeats every 30 years
MODEL_YEAR_CODES: Mapping[str, int] = MappingProxyType({
    '1': 2001, '2': 2002, '3': 2003, '4': 2004, '5': 2005,
    '6': 2006, '7': 2007, '8': 2008, '9': 2009,
    'A': 2010, 'B': 2011, 'C': 2012, 'D': 2013, 'E': 2014,
    'F': 2015, 'G': 2016, 'H': 2017, 'J': 2018, 'K': 2019,
    'L': 2020, 'M': 2021, 'N': 2022, 'P': 2023, 'R': 2024,
    'S': 2025, 'T': 2026, 'V': 2027, 'W': 2028, 'X': 2029,
    'Y': 2030,
})

MODEL_YEAR_CYCLE = 30

# Tokens whose leading letter OCR commonly drops
MANUFACTURER_VARIANTS: Mapping[str, str] = MappingProxyType({
    'oyota': 'Toyota',
    'ord': 'Ford',
    'mw': 'BMW',
    'ercedes': 'Mercedes-Benz',
    'olkswagen': 'Volkswagen',
    'yundai': 'Hyundai',
    'issan': 'Nissan',
    'azda': 'Mazda',
    'ubaru': 'Subaru',
    'acura': 'Acura',
    'honda': 'Honda',
    'tesla': 'Tesla',
    'hevrolet': 'Chevrolet',
})

_MANUFACTURER_NAMES = (
    # Multi-word names must win over their first word
    'Aston Martin', 'Alfa Romeo', 'Land Rover', 'Range Rover',
    'Rolls Royce', 'Rolls-Royce', 'Mercedes-Benz', 'Harley-Davidson',
    'Harley Davidson', 'General Motors', 'AM General', 'Mahindra & Mahindra',
    'Morgan Motor Company', 'McLaren Automotive', 'Dodge Ram',
    'Chevrolet Division', 'American Motors', 'Mercedes Benz',
    'Acura', 'Audi', 'Bentley', 'BMW', 'Buick', 'Cadillac', 'Chevrolet',
    'Chrysler', 'Dodge', 'Ferrari', 'Fiat', 'Ford', 'Genesis', 'GMC',
    'Honda', 'Hummer', 'Hyundai', 'Infiniti', 'Jaguar', 'Jeep', 'Kia',
    'Lamborghini', 'Lexus', 'Lincoln', 'Lucid', 'Maserati', 'Mazda',
    'McLaren', 'Mercedes', 'Mercury', 'Mini', 'Mitsubishi', 'Nissan',
    'Polestar', 'Pontiac', 'Porsche', 'Ram', 'Rivian', 'Saab', 'Saturn',
    'Scion', 'Subaru', 'Suzuki', 'Tesla', 'Toyota', 'Volkswagen', 'Volvo',
)

CANONICAL_MANUFACTURERS: Tuple[str, ...] = tuple(
    sorted(_MANUFACTURER_NAMES, key=len, reverse=True)
)

# Spaced spellings reported under their hyphenated name
MANUFACTURER_ALIASES: Mapping[str, str] = MappingProxyType({
    'Mercedes Benz': 'Mercedes-Benz',
})

SUBMODEL_RULES: Mapping[str, SubmodelRule] = MappingProxyType({
    'BMW': SubmodelRule(marker='M', keywords=('Competition', 'M Sport', 'Individual')),
    'Audi': SubmodelRule(marker='RS', keywords=('Performance', 'Sportback')),
})

MODEL_CORRECTIONS: Mapping[str, Tuple[Tuple[str, str], ...]] = MappingProxyType({
    'Volvo': (('XG60', 'XC60'), ('XG90', 'XC90'), ('XG40', 'XC40')),
})

ARTIFACT_TOKENS: Tuple[str, ...] = ('are', 'clot', 'Vehicles', 'oo', 'Co', '}', ')', '(')


@dataclass(frozen=True)
class LookupTables:
    """
    Bundle of the static tables, injected into resolver components.

    Tests can build a LookupTables with trimmed or extended tables
    without touching the module-level defaults.

    Example:
        >>> tables = default_tables()
        >>> tables.manufacturer_prefixes['WBS']
        'BMW'
    """
    manufacturer_prefixes: Mapping[str, str] = field(default_factory=lambda: MANUFACTURER_PREFIXES)
    model_year_codes: Mapping[str, int] = field(default_factory=lambda: MODEL_YEAR_CODES)
    manufacturer_variants: Mapping[str, str] = field(default_factory=lambda: MANUFACTURER_VARIANTS)
    canonical_manufacturers: Tuple[str, ...] = CANONICAL_MANUFACTURERS
    manufacturer_aliases: Mapping[str, str] = field(default_factory=lambda: MANUFACTURER_ALIASES)
    submodel_rules: Mapping[str, SubmodelRule] = field(default_factory=lambda: SUBMODEL_RULES)
    model_corrections: Mapping[str, Tuple[Tuple[str, str], ...]] = field(default_factory=lambda: MODEL_CORRECTIONS)
    artifact_tokens: Tuple[str, ...] = ARTIFACT_TOKENS
    model_year_cycle: int = MODEL_YEAR_CYCLE

    def canonical_name(self, name: str) -> str:
        """Return the canonical spelling of ``name`` if it is a known manufacturer."""
        lowered = name.lower()
        for candidate in self.canonical_manufacturers:
            if candidate.lower() == lowered:
                return self.manufacturer_aliases.get(candidate, candidate)
        return name


@lru_cache(maxsize=1)
def default_tables() -> LookupTables:
    """Return the shared, immutable default table bundle."""
    return LookupTables()

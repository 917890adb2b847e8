"""
Report Text Patterns.

Compiled regular expressions for every field of both report dialects,
grouped by the tier that uses them. Tier-1 patterns expect clean labels
and values; the "corrupted" groups tolerate dropped letters and digit
runs that lost their decimal point.

Author: ML Engineering Team
"""

import re

# Amount with cents; OCR may put a space around the decimal ("9,251 .08")
AMOUNT_TOKEN = r'([0-9][0-9,]*\s?\.\s?\d{2})(?!\d)'

# Amount that may have lost its decimal point ("978221")
LOOSE_AMOUNT_TOKEN = r'([0-9][0-9,]*(?:\s?\.\s?\d{1,2})?)(?!\d)'

MILEAGE_TOKEN = r'(\d{1,3}(?:,\d{3})+|\d{1,6})'

# Pre-adjustment values must never be taken for a market or settlement value
PRE_ADJUSTMENT_LABEL = re.compile(r'\bbase\s*(?:vehicle\s*)?va[lu]', re.IGNORECASE)

# =============================================================================
# IDENTIFIER
# =============================================================================

LABELED_IDENTIFIER = re.compile(
    r'(?i:\bVIN\b)\s*[:#.]?\s*([A-HJ-NPR-Z0-9]{17})(?![A-Za-z0-9])'
)

TOLERANT_LABELED_IDENTIFIER = re.compile(
    r'(?i:(?<![A-Za-z])V\s?[I1l|]\s?N)\s*[:#.]?\s*([A-Za-z0-9]{17,25})(?![A-Za-z0-9])'
)

UNLABELED_IDENTIFIER = re.compile(r'(?<![A-Za-z0-9])([A-Z0-9]{17,18})(?![A-Za-z0-9])')

ALPHABET_IDENTIFIER = re.compile(r'(?<![A-Za-z0-9])([A-HJ-NPR-Z0-9]{17})(?![A-Za-z0-9])')

# Real identifiers end in a serial number, so they always carry digits
MIN_IDENTIFIER_DIGITS = 5

# =============================================================================
# VEHICLE (year, manufacturer, model)
# =============================================================================

MITCHELL_LOSS_VEHICLE = re.compile(r'Loss vehicle:\s*(\d{4})\s+(.+?)\s*\|', re.IGNORECASE)

MITCHELL_LOSS_VEHICLE_CORRUPTED = (
    re.compile(r'L?oss\s*v?ehicle\s*[:;]?\s*(\d{4})\s+(.+?)\s*(?:\||$)', re.IGNORECASE),
    re.compile(r'(?:^|\s)i\s+l\s*[:;]\s*(\d{4})\s+(.+?)\s*(?:\||$)', re.IGNORECASE),
)

CCC_YEAR = re.compile(r'^Year\s*:?\s+(\d{4})\b')
CCC_MAKE = re.compile(r'^Make\s*:?\s+(.+)$')
CCC_MODEL = re.compile(r'^Model\s*:?\s+(.+)$')
CCC_LOSS_VEHICLE = re.compile(r'^Loss\s+[Vv]ehicle:?\s+(\d{4})\s+(.+?)\s*$')

CCC_YEAR_CORRUPTED = re.compile(r'^(?:Y?ear|Yr)\.?\s*:?\s*(\d{4})\b', re.IGNORECASE)
CCC_MAKE_CORRUPTED = re.compile(r'^(?:M?ake|Mak)\s*[:.]?\s+(.+)$', re.IGNORECASE)
CCC_MODEL_CORRUPTED = re.compile(r'^(?:M?odel|Mode1|Mod3l)\s*[:.]?\s+(.+)$', re.IGNORECASE)

# =============================================================================
# ODOMETER
# =============================================================================

MITCHELL_MILES = re.compile(r'(?<![\d,])' + MILEAGE_TOKEN + r'\s*miles\b', re.IGNORECASE)
MITCHELL_MILEAGE = re.compile(r'\bMileage\s*:?\s+' + MILEAGE_TOKEN + r'\b', re.IGNORECASE)
CCC_ODOMETER = re.compile(r'^Odometer\s*:?\s+' + MILEAGE_TOKEN + r'\b')

ODOMETER_LABEL_CORRUPTED = re.compile(
    r'(?:M?i[l1]e?age|[O0]?d[o0]meter)\s*[:.]?\s*(.+)$', re.IGNORECASE
)
MILES_CORRUPTED = re.compile(
    r'(?<![\d,])(\d{1,3}(?:[,.\s]\d{3})+|\d{1,6})\s*m[il1][l1I]es\b', re.IGNORECASE
)
LEADING_MILEAGE = re.compile(r'^(\d{1,3}(?:[,.\s]\d{3})+|\d{1,6})(?!\d)')

# =============================================================================
# LOCATION
# =============================================================================

MITCHELL_LOCATION = re.compile(r'(?i:Location)[:\s]*([A-Z]{2}\s+\d{5}(?:-\d{4})?)\b')
MITCHELL_LOCATION_LINE = re.compile(r'^([A-Z]{2}\s+\d{5}(?:-\d{4})?)$')
CCC_LOCATION = re.compile(
    r'^Location\s*:?\s+([A-Z][A-Z\s,.\-0-9]+?)(?:\s+(?:are|clot|Vehicles)\b|\s*$)'
)

LOCATION_LABEL_CORRUPTED = re.compile(r'(?:L?ocat[il1]on|Loc\.)\s*[:.]?\s*(.+)$', re.IGNORECASE)
STATE_ZIP = re.compile(r'\b[A-Z]{2}\s*\d{5}(?:-\d{4})?\b')

# =============================================================================
# MONETARY VALUES
# =============================================================================

MITCHELL_MARKET_VALUE = re.compile(
    r'Market\s+Val(?:ue|e)\s*[=:]?\s*\$\s*' + AMOUNT_TOKEN, re.IGNORECASE
)
MITCHELL_SETTLEMENT_VALUE = re.compile(
    r'Settlement\s+Value\s*[=:]?\s*\$\s*' + AMOUNT_TOKEN, re.IGNORECASE
)
CCC_ADJUSTED_VALUE = re.compile(
    r'^Adjusted\s+Vehicle\s+Value\s*:?\s*\$\s*' + AMOUNT_TOKEN, re.IGNORECASE
)
CCC_TOTAL = re.compile(r'^Total\s*:?\s*\$\s*' + AMOUNT_TOKEN)

MITCHELL_MARKET_CORRUPTED = (
    re.compile(r'M?arket\s*va[lu](?:ue|e|aue?)\s*[=:]?\s*[sS$]?\s*' + LOOSE_AMOUNT_TOKEN,
               re.IGNORECASE),
    re.compile(r'[vmu]a[rliu]k[eoa]t\s*[vmu]a[lti][liuo][eoa]\s*=\s*[sS$]?\s*([0-9]{6,})',
               re.IGNORECASE),
)
MITCHELL_SETTLEMENT_CORRUPTED = (
    re.compile(r'S?ett?[l1I]e?\s*m?ent\s*Va[lu]u?e\s*[=:]?\s*[sS$]?\s*' + LOOSE_AMOUNT_TOKEN,
               re.IGNORECASE),
)
CCC_ADJUSTED_CORRUPTED = (
    re.compile(r'A?d[jy]usted\s*Veh?i?cle\s*Va[lu]u?e\s*[=:]?\s*[sS$]?\s*' + LOOSE_AMOUNT_TOKEN,
               re.IGNORECASE),
)
CCC_TOTAL_CORRUPTED = (
    re.compile(r'^T?ota[l1I]\s*[=:]?\s*[sS$]\s*' + LOOSE_AMOUNT_TOKEN),
)

MARKET_LABEL_ONLY = re.compile(
    r'^(?:M?arket\s*Val(?:ue|e)|A?djusted\s+Vehicle\s+Value)\s*[:=]?\s*$', re.IGNORECASE
)
SETTLEMENT_LABEL_ONLY = re.compile(
    r'^(?:S?ettle\s*m?ent\s*Value|Total)\s*[:=]?\s*$', re.IGNORECASE
)
CURRENCY_AMOUNT = re.compile(r'\$\s*' + LOOSE_AMOUNT_TOKEN)
STANDALONE_AMOUNT = re.compile(r'^\$\s*([0-9][0-9,]*\.\d+)$')
SETTLEMENT_CONTEXT = re.compile(r'ettle', re.IGNORECASE)

# Lines carrying another amount's label end a lookahead scan
MARKET_AMOUNT_LABEL = re.compile(
    r'M?arket\s*Va[lu]|A?d[jy]usted\s*Veh?i?cle\s*Va[lu]', re.IGNORECASE
)
SETTLEMENT_AMOUNT_LABEL = re.compile(
    r'S?ett?[l1I]e?\s*m?ent\s*Va[lu]|^\s*T?ota[l1I]\s*(?:[:=$]|$)', re.IGNORECASE
)

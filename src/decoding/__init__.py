"""
Identifier Decoding Module.

Decodes vehicle identifiers (VINs) into manufacturer and model year.

Author: ML Engineering Team
"""

from .identifier_decoder import IdentifierDecoder, DecodedIdentifier

__all__ = [
    'IdentifierDecoder',
    'DecodedIdentifier'
]

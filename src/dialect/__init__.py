"""
Dialect Classification Module.

Author: ML Engineering Team
"""

from .classifier import Dialect, DialectClassifier, parse_dialect

__all__ = [
    'Dialect',
    'DialectClassifier',
    'parse_dialect'
]

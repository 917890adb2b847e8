"""
Lookup Table Module.

Immutable reference data (VIN prefixes, model-year codes, manufacturer
names and variants, submodel rules) shared by every resolver component.

Author: ML Engineering Team
"""

from .tables import LookupTables, SubmodelRule, default_tables

__all__ = [
    'LookupTables',
    'SubmodelRule',
    'default_tables'
]

"""
Vehicle Valuation Report Resolver - Source Package.

This package contains all core modules for turning OCR text of vehicle
total-loss valuation reports into structured vehicle records. Each
module has a single responsibility.

Modules:
    - ingestion: Text and scanned PDF input (OCR boundary)
    - lookup: Static reference tables
    - correction: OCR noise correction and field validators
    - decoding: VIN manufacturer and model-year decoding
    - dialect: Report dialect classification
    - resolver: Tiered field resolution and the resolution engine
    - confidence: Weighted confidence scoring
    - output_handler: Excel, JSON and database output
    - evaluation: Quality metrics and accuracy computation

Architecture:
    Ingestion → Dialect → Field Cascades → Confidence → Output
                                                    ↓
                                              Evaluation
"""

__version__ = "1.0.0"
__author__ = "ML Engineering Team"

__all__ = [
    'ingestion',
    'lookup',
    'correction',
    'decoding',
    'dialect',
    'resolver',
    'confidence',
    'output_handler',
    'evaluation',
    'utils'
]

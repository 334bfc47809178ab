"""
Vaccine Kernel

Lot-level vaccine inventory core with:
- Immutable domain records (vaccines, lots, receipts, administration events)
- Typed errors carrying field and identifier context
- Injectable clock for deterministic expiry classification
- Pluggable storage (in-memory fixtures or SQLAlchemy)
"""

__version__ = "0.1.0"

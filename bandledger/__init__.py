"""BandLedger: shared-expense ledger for bands."""

__version__ = "0.1.0"

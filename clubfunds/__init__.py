"""Club finance backend: role ledger, payment/expense state machines, audit trail."""

__version__ = "0.1.0"

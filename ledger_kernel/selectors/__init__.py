"""Read-only queries over the ledger.  Selectors never add, flush or commit."""

"""Label Ledger Service: append-only label events folded into active sets."""

"""Data-layer exports for Label Ledger Service."""

from services.state.label_ledger.data.repository import (
    SqlLabelEventRepository,
    fold_active_labels,
)
from services.state.label_ledger.data.runtime import LedgerPostgresRuntime

__all__ = ["LedgerPostgresRuntime", "SqlLabelEventRepository", "fold_active_labels"]

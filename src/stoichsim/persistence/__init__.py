"""Persistence helpers for StoichSim."""

from stoichsim.persistence.sqlite_store import (
    connect,
    delete_simulation,
    ensure_schema,
    history_record,
    history_summary,
    list_history,
    save_simulation,
)

__all__ = [
    "connect",
    "delete_simulation",
    "ensure_schema",
    "history_record",
    "history_summary",
    "list_history",
    "save_simulation",
]

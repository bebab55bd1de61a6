"""SQLite persistence for simulation history."""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from stoichsim.errors import PersistenceError
from stoichsim.models import SimulationResult

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS simulation_history (
  id INTEGER PRIMARY KEY,
  user_id TEXT,
  reaction_id TEXT,
  reactant_a TEXT NOT NULL,
  reactant_b TEXT NOT NULL,
  reactant_a_quantity REAL NOT NULL,
  reactant_b_quantity REAL NOT NULL,
  reactant_a_unit TEXT NOT NULL,
  reactant_b_unit TEXT NOT NULL,
  balanced_equation TEXT NOT NULL,
  limiting_reagent TEXT NOT NULL,
  products_formed JSON NOT NULL,
  leftover_reagent JSON,
  theoretical_yield REAL NOT NULL,
  reaction_type TEXT,
  observation TEXT,
  calculation_steps JSON,
  created_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_history_created
  ON simulation_history (created_at);
"""

_JSON_COLUMNS = ("products_formed", "leftover_reagent", "calculation_steps")


def connect(history_file: str | Path) -> sqlite3.Connection:
    """Open (and create) a history database."""
    path = Path(history_file)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        connection = sqlite3.connect(path)
    except (OSError, sqlite3.Error) as exc:
        raise PersistenceError(f"Cannot open history file {path}: {exc}") from exc
    connection.row_factory = sqlite3.Row
    return connection


def ensure_schema(connection: sqlite3.Connection) -> None:
    try:
        connection.executescript(SCHEMA_SQL)
        connection.commit()
    except sqlite3.Error as exc:
        raise PersistenceError(f"Cannot create history schema: {exc}") from exc


def history_record(result: SimulationResult) -> Dict[str, Any]:
    """Flatten a result into the columns stored for a history entry."""
    reaction = result.reaction
    return {
        "reaction_id": reaction.id,
        "reactant_a": reaction.reactant_a.name,
        "reactant_b": reaction.reactant_b.name,
        "reactant_a_quantity": result.input_a.quantity,
        "reactant_b_quantity": result.input_b.quantity,
        "reactant_a_unit": result.input_a.unit,
        "reactant_b_unit": result.input_b.unit,
        "balanced_equation": reaction.balanced_equation,
        "limiting_reagent": result.limiting_reagent_name,
        "products_formed": [
            {
                "name": p.name,
                "formula": p.formula,
                "moles": p.moles,
                "mass": p.mass,
                "coefficient": p.coefficient,
            }
            for p in result.products_formed
        ],
        "leftover_reagent": {
            "name": result.excess_reagent.name,
            "mass": result.excess_reagent.leftover_mass,
        },
        "theoretical_yield": result.theoretical_yield,
        "reaction_type": reaction.reaction_type,
        "observation": reaction.observation,
        "calculation_steps": list(result.calculation_steps),
    }


def save_simulation(
    connection: sqlite3.Connection,
    result: SimulationResult,
    user_id: Optional[str] = None,
    created_utc: Optional[str] = None,
) -> int:
    """Persist a simulation result and return its history ID."""
    record = history_record(result)
    record["user_id"] = user_id
    record["created_at"] = created_utc or _utc_now()
    for column in _JSON_COLUMNS:
        record[column] = _json_dumps(record[column])

    columns = ", ".join(record)
    placeholders = ", ".join("?" for _ in record)
    try:
        cursor = connection.execute(
            f"INSERT INTO simulation_history ({columns}) VALUES ({placeholders})",
            tuple(record.values()),
        )
        connection.commit()
    except sqlite3.Error as exc:
        raise PersistenceError(f"Error saving simulation: {exc}") from exc
    history_id = int(cursor.lastrowid)
    logger.info("Saved simulation %d (%s)", history_id, record["balanced_equation"])
    return history_id


def list_history(
    connection: sqlite3.Connection,
    user_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Return history entries, newest first."""
    query = "SELECT * FROM simulation_history"
    params: List[Any] = []
    if user_id is not None:
        query += " WHERE user_id = ?"
        params.append(user_id)
    query += " ORDER BY created_at DESC, id DESC"
    if limit is not None:
        query += " LIMIT ?"
        params.append(int(limit))
    try:
        rows = connection.execute(query, params).fetchall()
    except sqlite3.Error as exc:
        raise PersistenceError(f"Error loading history: {exc}") from exc
    return [_row_to_entry(row) for row in rows]


def delete_simulation(connection: sqlite3.Connection, history_id: int) -> bool:
    """Delete a history entry; returns False when no such entry exists."""
    try:
        cursor = connection.execute(
            "DELETE FROM simulation_history WHERE id = ?", (history_id,)
        )
        connection.commit()
    except sqlite3.Error as exc:
        raise PersistenceError(f"Error deleting simulation {history_id}: {exc}") from exc
    return cursor.rowcount > 0


def history_summary(
    connection: sqlite3.Connection, user_id: Optional[str] = None
) -> Dict[str, Any]:
    """Totals shown on the history dashboard."""
    entries = list_history(connection, user_id=user_id)
    total_yield = 0.0
    for entry in entries:
        total_yield += float(entry["theoretical_yield"])
    return {
        "simulations": len(entries),
        "total_yield": total_yield,
        "distinct_reactions": len({entry["balanced_equation"] for entry in entries}),
    }


def _row_to_entry(row: sqlite3.Row) -> Dict[str, Any]:
    entry = dict(row)
    for column in _JSON_COLUMNS:
        if entry.get(column) is not None:
            entry[column] = json.loads(entry[column])
    return entry


def _json_dumps(payload: Mapping[str, object] | List[Any] | None) -> Optional[str]:
    if payload is None:
        return None
    return json.dumps(payload, ensure_ascii=False, sort_keys=True)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()

"""SQLite storage for instruction overrides, generation history and contact research.

Stores admin edits to the outreach prompt sections, one row per outreach
generation (success or failure, token counts, request/response JSON), and
the research gathered for each contact.

Uses Python's built-in sqlite3 — zero dependencies.
"""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
from typing import Any

import config

logger = logging.getLogger(__name__)

DB_PATH = config.DB_PATH

# Thread-local connections (sqlite3 objects can't be shared across threads)
_local = threading.local()


def _get_conn() -> sqlite3.Connection:
    """Get a thread-local SQLite connection."""
    if getattr(_local, "conn", None) is None or getattr(_local, "path", None) != str(DB_PATH):
        _local.conn = sqlite3.connect(str(DB_PATH), check_same_thread=False)
        _local.conn.row_factory = sqlite3.Row
        _local.conn.execute("PRAGMA journal_mode=WAL")
        _local.path = str(DB_PATH)
    return _local.conn


def close_db():
    """Close this thread's connection (tests swap DB_PATH between cases)."""
    conn = getattr(_local, "conn", None)
    if conn is not None:
        conn.close()
    _local.conn = None
    _local.path = None


def init_db():
    """Create tables if they don't exist. Call once at startup."""
    conn = _get_conn()
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS instruction_settings (
            section_key     TEXT    PRIMARY KEY,
            content         TEXT    NOT NULL DEFAULT '',
            is_active       INTEGER NOT NULL DEFAULT 1,
            updated_at      TEXT    NOT NULL DEFAULT (datetime('now', 'localtime'))
        );

        CREATE TABLE IF NOT EXISTS outreach_requests (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            created_at      TEXT    NOT NULL DEFAULT (datetime('now', 'localtime')),
            contact_id      TEXT    DEFAULT '',
            archetype       TEXT    DEFAULT '',
            provider        TEXT    DEFAULT '',
            model           TEXT    DEFAULT '',
            input_tokens    INTEGER NOT NULL DEFAULT 0,
            output_tokens   INTEGER NOT NULL DEFAULT 0,
            success         INTEGER NOT NULL DEFAULT 1,
            error_message   TEXT,
            elapsed_ms      INTEGER,
            request_json    TEXT    NOT NULL DEFAULT '{}',
            output_json     TEXT
        );

        CREATE TABLE IF NOT EXISTS contact_research (
            id              INTEGER PRIMARY KEY AUTOINCREMENT,
            contact_id      TEXT    NOT NULL,
            status          TEXT    NOT NULL DEFAULT 'processing',
            research_json   TEXT    NOT NULL DEFAULT '{}',
            created_at      TEXT    NOT NULL DEFAULT (datetime('now', 'localtime')),
            updated_at      TEXT    NOT NULL DEFAULT (datetime('now', 'localtime'))
        );

        CREATE INDEX IF NOT EXISTS idx_contact_research_contact
            ON contact_research(contact_id);
    """)
    conn.commit()
    logger.info("SQLite database initialized: %s", DB_PATH)


# ---------------------------------------------------------------------------
# Instruction sections
# ---------------------------------------------------------------------------

def set_instruction_section(section_key: str, content: str, is_active: bool = True):
    """Insert or replace an instruction override."""
    conn = _get_conn()
    conn.execute(
        """
        INSERT INTO instruction_settings (section_key, content, is_active)
        VALUES (?, ?, ?)
        ON CONFLICT(section_key) DO UPDATE SET
            content=excluded.content,
            is_active=excluded.is_active,
            updated_at=datetime('now','localtime')
        """,
        (section_key, content, 1 if is_active else 0),
    )
    conn.commit()
    logger.info("Saved instruction section %s (active=%s, %d chars)", section_key, is_active, len(content))


def delete_instruction_section(section_key: str) -> bool:
    """Delete an override. Returns True if found."""
    conn = _get_conn()
    cur = conn.execute("DELETE FROM instruction_settings WHERE section_key=?", (section_key,))
    conn.commit()
    return cur.rowcount > 0


def list_instruction_settings() -> list[dict]:
    """Return every stored override, active or not."""
    conn = _get_conn()
    rows = conn.execute(
        "SELECT section_key, content, is_active, updated_at FROM instruction_settings ORDER BY section_key"
    ).fetchall()
    return [
        {
            "section_key": r["section_key"],
            "content": r["content"],
            "is_active": bool(r["is_active"]),
            "updated_at": r["updated_at"],
        }
        for r in rows
    ]


def get_active_instruction_overrides() -> dict[str, str]:
    """Return {section_key: content} for active, non-empty overrides."""
    return {
        s["section_key"]: s["content"]
        for s in list_instruction_settings()
        if s["is_active"] and s["content"].strip()
    }


# ---------------------------------------------------------------------------
# Outreach request log
# ---------------------------------------------------------------------------

def log_outreach_request(
    request: dict[str, Any],
    *,
    success: bool,
    contact_id: str | None = None,
    archetype: str = "",
    provider: str = "",
    model: str = "",
    input_tokens: int = 0,
    output_tokens: int = 0,
    elapsed_ms: int | None = None,
    output: dict[str, Any] | None = None,
    error_message: str | None = None,
) -> int:
    """Record one generation attempt. Returns the row id."""
    conn = _get_conn()
    cur = conn.execute(
        """
        INSERT INTO outreach_requests
            (contact_id, archetype, provider, model, input_tokens, output_tokens,
             success, error_message, elapsed_ms, request_json, output_json)
        VALUES (?,?,?,?,?,?,?,?,?,?,?)
        """,
        (
            contact_id or "",
            archetype,
            provider,
            model,
            int(input_tokens or 0),
            int(output_tokens or 0),
            1 if success else 0,
            (error_message or "")[:500] or None,
            elapsed_ms,
            json.dumps(request, default=str),
            json.dumps(output, default=str) if output is not None else None,
        ),
    )
    conn.commit()
    return cur.lastrowid


def list_outreach_requests(limit: int = 50) -> list[dict]:
    """List logged generations, newest first (without the JSON payloads)."""
    conn = _get_conn()
    rows = conn.execute(
        """
        SELECT id, created_at, contact_id, archetype, provider, model,
               input_tokens, output_tokens, success, error_message, elapsed_ms
        FROM outreach_requests
        ORDER BY id DESC
        LIMIT ?
        """,
        (limit,),
    ).fetchall()
    return [{**dict(r), "success": bool(r["success"])} for r in rows]


def get_outreach_request(request_id: int) -> dict | None:
    """Get a logged generation with its request and output payloads."""
    conn = _get_conn()
    row = conn.execute("SELECT * FROM outreach_requests WHERE id=?", (request_id,)).fetchone()
    if not row:
        return None
    record = dict(row)
    record["success"] = bool(record["success"])
    record["request"] = json.loads(record.pop("request_json") or "{}")
    output_json = record.pop("output_json")
    record["output"] = json.loads(output_json) if output_json else None
    return record


# ---------------------------------------------------------------------------
# Contact research
# ---------------------------------------------------------------------------

def save_contact_research(contact_id: str, research: dict[str, Any], status: str = "completed") -> int:
    """Store a research result for a contact. Returns the row id."""
    conn = _get_conn()
    cur = conn.execute(
        "INSERT INTO contact_research (contact_id, status, research_json) VALUES (?,?,?)",
        (contact_id, status, json.dumps(research, default=str)),
    )
    conn.commit()
    logger.info("Saved %s research for contact %s (#%d)", status, contact_id, cur.lastrowid)
    return cur.lastrowid


def get_latest_research(contact_id: str) -> dict | None:
    """Latest completed research payload for a contact, or None."""
    conn = _get_conn()
    row = conn.execute(
        """
        SELECT research_json FROM contact_research
        WHERE contact_id=? AND status='completed'
        ORDER BY id DESC
        LIMIT 1
        """,
        (contact_id,),
    ).fetchone()
    if not row:
        return None
    try:
        return json.loads(row["research_json"])
    except json.JSONDecodeError:
        logger.warning("Corrupt research_json for contact %s", contact_id)
        return None

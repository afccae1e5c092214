"""
SQLite persistence layer for claim cards.
Nested fields (scope, evidence, queries, provenance) are stored as JSON text.
"""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from claimcards.core.config import settings
from claimcards.core.logger import get_logger
from claimcards.core.schemas import ClaimCard, ItemId

logger = get_logger(__name__)

_UPSERT_CARD_SQL = """
    INSERT INTO claim_cards
    (id, claim, scope, topic, verdict, confidence, evidence, queries, provenance, notes, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
    ON CONFLICT(id) DO UPDATE SET
        claim = excluded.claim,
        scope = excluded.scope,
        topic = excluded.topic,
        verdict = excluded.verdict,
        confidence = excluded.confidence,
        evidence = excluded.evidence,
        queries = excluded.queries,
        provenance = excluded.provenance,
        notes = excluded.notes,
        updated_at = excluded.updated_at
"""

_LINK_SQL = """
    INSERT INTO item_claims (item_id, claim_id, created_at)
    VALUES (?, ?, ?)
    ON CONFLICT DO NOTHING
"""


class SQLiteClaimCardStore:
    """SQLite-based claim card storage with idempotent upserts."""

    name = "sqlite"

    def __init__(self, db_path: str | Path | None = None):
        self.db_path = Path(db_path or settings.CLAIM_CARDS_DB_PATH)
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Create database and schema if not exists."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS claim_cards (
                        id TEXT PRIMARY KEY,
                        claim TEXT NOT NULL,
                        scope TEXT,
                        topic TEXT,
                        verdict TEXT NOT NULL,
                        confidence REAL NOT NULL,
                        evidence TEXT NOT NULL,
                        queries TEXT NOT NULL,
                        provenance TEXT NOT NULL,
                        notes TEXT,
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS item_claims (
                        item_id TEXT NOT NULL,
                        claim_id TEXT NOT NULL,
                        created_at TEXT NOT NULL,
                        PRIMARY KEY (item_id, claim_id)
                    )
                    """
                )
                conn.execute("CREATE INDEX IF NOT EXISTS idx_item_claims_claim ON item_claims(claim_id)")
                conn.commit()
            logger.info(f"[SQLiteClaimCardStore] Database initialized at {self.db_path}")
        except Exception as e:
            logger.error(f"[SQLiteClaimCardStore] Failed to initialize database: {e}")
            raise

    @staticmethod
    def _card_row(card: ClaimCard) -> tuple:
        record = card.to_record()
        return (
            record["id"],
            record["claim"],
            json.dumps(record["scope"]) if record["scope"] is not None else None,
            record["topic"],
            record["verdict"],
            float(record["confidence"]),
            json.dumps(record["evidence"]),
            json.dumps(record["queries"]),
            json.dumps(record["provenance"]),
            record["notes"],
            record["created_at"],
            record["updated_at"],
        )

    @staticmethod
    def _row_to_card(row: sqlite3.Row) -> ClaimCard:
        record: Dict[str, Any] = {
            "id": row["id"],
            "claim": row["claim"],
            "scope": json.loads(row["scope"]) if row["scope"] else None,
            "topic": row["topic"],
            "verdict": row["verdict"],
            "confidence": row["confidence"],
            "evidence": json.loads(row["evidence"]),
            "queries": json.loads(row["queries"]),
            "provenance": json.loads(row["provenance"]),
            "notes": row["notes"],
            "created_at": row["created_at"],
            "updated_at": row["updated_at"],
        }
        return ClaimCard.from_record(record)

    async def save_card(self, card: ClaimCard, item_id: Optional[ItemId] = None) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute(_UPSERT_CARD_SQL, self._card_row(card))
            if item_id is not None:
                linked_at = datetime.now(timezone.utc).isoformat()
                conn.execute(_LINK_SQL, (str(item_id), card.id, linked_at))
            conn.commit()

    async def save_cards_for_item(self, cards: List[ClaimCard], item_id: ItemId) -> None:
        linked_at = datetime.now(timezone.utc).isoformat()
        with sqlite3.connect(self.db_path) as conn:
            conn.executemany(_UPSERT_CARD_SQL, [self._card_row(c) for c in cards])
            conn.executemany(_LINK_SQL, [(str(item_id), c.id, linked_at) for c in cards])
            conn.commit()
        logger.debug(f"[SQLiteClaimCardStore] Saved batch of {len(cards)} cards for item {item_id}")

    async def get_card(self, card_id: str) -> Optional[ClaimCard]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            row = conn.execute("SELECT * FROM claim_cards WHERE id = ? LIMIT 1", (card_id,)).fetchone()
        return self._row_to_card(row) if row else None

    async def get_cards_for_item(self, item_id: ItemId) -> List[ClaimCard]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            rows = conn.execute(
                """
                SELECT cc.* FROM claim_cards cc
                INNER JOIN item_claims ic ON ic.claim_id = cc.id
                WHERE ic.item_id = ?
                ORDER BY ic.rowid
                """,
                (str(item_id),),
            ).fetchall()
        return [self._row_to_card(r) for r in rows]

    async def delete_card(self, card_id: str) -> None:
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("DELETE FROM item_claims WHERE claim_id = ?", (card_id,))
            conn.execute("DELETE FROM claim_cards WHERE id = ?", (card_id,))
            conn.commit()

"""Load front-desk facts into a knowledge store."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from frontdesk.core.protocols import IKnowledgeStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = Path(__file__).resolve().parent / "knowledge_seed.json"


def load_seed(path: str | Path) -> list[dict[str, str]]:
    """Read ``{"entries": [{"question": ..., "answer": ...}]}`` from disk."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    entries = data.get("entries", [])
    for entry in entries:
        if not entry.get("question") or not entry.get("answer"):
            raise ValueError(f"Seed entry needs question and answer: {entry!r}")
    return entries


def seed_knowledge(store: IKnowledgeStore, path: str | Path, now: datetime) -> int:
    """Upsert every seed entry; returns the number written."""
    entries = load_seed(path)
    for entry in entries:
        store.upsert(entry["question"], entry["answer"], now)
    logger.info("Seeded %d knowledge entries from %s", len(entries), path)
    return len(entries)

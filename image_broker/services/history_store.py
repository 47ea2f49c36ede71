# FILE: image_broker/services/history_store.py
"""
History store (append-only JSONL per collection)
"""
import hashlib
import json
import logging
import threading
import time
import uuid
from pathlib import Path
from typing import List, Optional

from image_broker.models.history import HistoryItem, HistoryItemIn

logger = logging.getLogger(__name__)


class HistoryStore:
    """Store for generated-image history, keyed by collection id"""

    def __init__(self, history_dir: str, limit: int = 200):
        self.history_dir = Path(history_dir)
        self.history_dir.mkdir(parents=True, exist_ok=True)
        self.limit = limit
        self._lock = threading.Lock()

    def _collection_file(self, collection_id: str) -> Path:
        # Collection ids are client-chosen; never use them as a path
        digest = hashlib.sha256(collection_id.encode("utf-8")).hexdigest()[:32]
        return self.history_dir / f"{digest}.jsonl"

    def add_items(
        self,
        collection_id: str,
        items: List[HistoryItemIn],
        now_ms: Optional[int] = None
    ) -> List[HistoryItem]:
        """Append a batch; items without createdAt share one timestamp"""
        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)

        records = [
            HistoryItem(
                id=str(uuid.uuid4()),
                collection_id=collection_id,
                created_at=item.created_at if item.created_at is not None else now_ms,
                prompt=item.prompt,
                style=item.style,
                model_id=item.model_id,
                aspect=item.aspect,
                seed=item.seed,
                width=item.width,
                height=item.height,
                image_url=item.image_url,
            )
            for item in items
        ]

        lines = "".join(json.dumps(r.model_dump(by_alias=True)) + "\n" for r in records)
        with self._lock:
            with open(self._collection_file(collection_id), "a", encoding="utf-8") as f:
                f.write(lines)

        logger.info(f"Stored {len(records)} history item(s)")
        return records

    def list_items(self, collection_id: str, limit: Optional[int] = None) -> List[HistoryItem]:
        """Newest first, capped at `limit` (store default when omitted)"""
        limit = min(limit or self.limit, self.limit)
        path = self._collection_file(collection_id)
        if not path.exists():
            return []

        records = []
        with open(path, "r", encoding="utf-8") as f:
            for line_no, line in enumerate(f, start=1):
                if not line.strip():
                    continue
                try:
                    record = HistoryItem.model_validate(json.loads(line))
                except ValueError as e:
                    logger.warning(f"Skipping unreadable history line {line_no} in {path.name}: {e}")
                    continue
                if record.collection_id == collection_id:
                    records.append(record)

        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]

"""
Review Queue Service - quotes waiting for a human decision.
Stores the queue as a JSON list on disk.
"""
import json
import logging
import threading
import uuid
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

STATUS_PENDING = 'pending'
STATUS_APPROVED = 'approved'
STATUS_REJECTED = 'rejected'


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class ReviewItem:
    """A quote in the review queue."""
    queue_id: str
    created_at: str
    customer_email: str = ""
    original_request: dict = field(default_factory=dict)
    generated_quote: dict = field(default_factory=dict)
    review_reasons: list[str] = field(default_factory=list)
    status: str = STATUS_PENDING
    reviewed_by: str = ""
    reviewed_at: str = ""
    notes: str = ""
    customer_notified: bool = False

    @classmethod
    def from_dict(cls, row: dict) -> 'ReviewItem':
        known = {k: v for k, v in row.items() if k in cls.__dataclass_fields__}
        return cls(**known)


class ReviewQueue:
    """File-backed review queue."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _ensure_file(self):
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text("[]", encoding='utf-8')

    def _load(self) -> list[ReviewItem]:
        self._ensure_file()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                rows = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Error loading review queue from %s: %s", self.path, e)
            return []

        if not isinstance(rows, list):
            logger.error("Review queue at %s is not a list, ignoring contents", self.path)
            return []
        return [ReviewItem.from_dict(r) for r in rows if isinstance(r, dict)]

    def _save(self, items: list[ReviewItem]):
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump([asdict(i) for i in items], f, indent=2)

    def add(
        self,
        quote: dict,
        reasons: list[str],
        original_request: Optional[dict] = None,
        customer_email: Optional[str] = None,
    ) -> str:
        """Queue a quote for review and return its queue id."""
        item = ReviewItem(
            queue_id=str(uuid.uuid4()),
            created_at=_now(),
            customer_email=customer_email or "",
            original_request=original_request or {},
            generated_quote=quote or {},
            review_reasons=list(reasons or []),
        )
        with self._lock:
            items = self._load()
            items.append(item)
            self._save(items)

        logger.info("Queued quote %s for review: %s", item.queue_id, ", ".join(item.review_reasons))
        return item.queue_id

    def list_all(self) -> list[ReviewItem]:
        return self._load()

    def list_pending(self) -> list[ReviewItem]:
        return [i for i in self._load() if i.status == STATUS_PENDING]

    def get(self, queue_id: str) -> Optional[ReviewItem]:
        for item in self._load():
            if item.queue_id == queue_id:
                return item
        return None

    def _decide(self, queue_id: str, status: str, reviewer_email: str, notes: Optional[str]) -> bool:
        with self._lock:
            items = self._load()
            for item in items:
                if item.queue_id == queue_id:
                    item.status = status
                    item.reviewed_by = reviewer_email
                    item.reviewed_at = _now()
                    item.notes = notes or ""
                    self._save(items)
                    logger.info("Review %s %s by %s", queue_id, status, reviewer_email)
                    return True
        return False

    def approve(self, queue_id: str, reviewer_email: str, notes: Optional[str] = None) -> bool:
        """Approve a queued quote. False if the id is unknown."""
        return self._decide(queue_id, STATUS_APPROVED, reviewer_email, notes)

    def reject(self, queue_id: str, reviewer_email: str, notes: Optional[str] = None) -> bool:
        """Reject a queued quote. False if the id is unknown."""
        return self._decide(queue_id, STATUS_REJECTED, reviewer_email, notes)

    def get_stats(self) -> dict:
        """Counts per status."""
        items = self._load()
        by_status = {}
        for item in items:
            by_status[item.status] = by_status.get(item.status, 0) + 1
        return {
            'total': len(items),
            'pending': by_status.get(STATUS_PENDING, 0),
            'approved': by_status.get(STATUS_APPROVED, 0),
            'rejected': by_status.get(STATUS_REJECTED, 0),
        }

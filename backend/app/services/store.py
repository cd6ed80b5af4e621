"""Animation record store: in-memory map with an optional JSONL append log.

Each write appends the full record; on start the log is replayed and the last
line per id wins, so the file always reflects the latest state of a record.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path

from app.errors import RecordNotFound
from app.models.animation import AnimationParams, AnimationRecord, Message, utcnow

logger = logging.getLogger(__name__)


class AnimationStore:
    def __init__(self, data_dir: Path | None = None) -> None:
        self._records: dict[int, AnimationRecord] = {}
        self._next_id = 1
        self._lock = threading.Lock()
        self.records_file: Path | None = None
        if data_dir is not None:
            data_dir.mkdir(parents=True, exist_ok=True)
            self.records_file = data_dir / "animations.jsonl"
            self._load()

    def _load(self) -> None:
        if self.records_file is None or not self.records_file.exists():
            return
        with open(self.records_file, encoding="utf-8") as f:
            for line_no, line in enumerate(f, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = AnimationRecord.model_validate_json(line)
                except ValueError as e:
                    logger.warning("Skipping corrupt record line %d in %s: %s", line_no, self.records_file, e)
                    continue
                self._records[record.id] = record
        if self._records:
            self._next_id = max(self._records) + 1
        logger.info("Loaded %d animation records from %s", len(self._records), self.records_file)

    def _persist(self, record: AnimationRecord) -> None:
        self._records[record.id] = record
        if self.records_file is None:
            return
        with open(self.records_file, "a", encoding="utf-8") as f:
            f.write(record.model_dump_json() + "\n")

    def create(
        self,
        original_svg: str,
        description: str,
        selected_elements: list[str],
        reference_elements: list[str] | None = None,
        parameters: AnimationParams | None = None,
    ) -> AnimationRecord:
        with self._lock:
            record = AnimationRecord(
                id=self._next_id,
                original_svg=original_svg,
                description=description,
                selected_elements=list(selected_elements),
                reference_elements=list(reference_elements or []),
                parameters=parameters or AnimationParams(),
            )
            self._next_id += 1
            self._persist(record)
        logger.info("Created animation record %d", record.id)
        return record

    def get(self, record_id: int) -> AnimationRecord:
        record = self._records.get(record_id)
        if record is None:
            raise RecordNotFound(record_id)
        return record

    def save_result(
        self,
        record_id: int,
        animated_svg: str,
        parameters: AnimationParams,
        turns: list[Message],
    ) -> AnimationRecord:
        with self._lock:
            record = self.get(record_id)
            updated = record.model_copy(update={
                "animated_svg": animated_svg,
                "error": None,
                "parameters": parameters,
                "conversation": [*record.conversation, *turns],
                "updated_at": utcnow(),
            })
            self._persist(updated)
        return updated

    def save_error(self, record_id: int, error: str, turns: list[Message] | None = None) -> AnimationRecord:
        """Record a failed generation. The previous animated SVG is cleared so it is never mistaken for the new result."""
        with self._lock:
            record = self.get(record_id)
            updated = record.model_copy(update={
                "animated_svg": None,
                "error": error,
                "conversation": [*record.conversation, *(turns or [])],
                "updated_at": utcnow(),
            })
            self._persist(updated)
        logger.warning("Animation record %d failed: %s", record_id, error)
        return updated

# src/autoturn/storage/queue_store.py

import json
import logging
import sqlite3
from typing import Any, Dict, List

from pydantic import ValidationError

from autoturn.core.exceptions import QueueImportError, ResourceLoadError
from autoturn.core.validation import validate_queue
from autoturn.models import QUEUE_VERSION, QueuedAction, QueueEnvelope, QueueExport, new_action_id
from autoturn.storage.database import Database, from_json, to_json

logger = logging.getLogger(__name__)


class ActionQueueManager:
    """
    Stores one ordered action queue per token in SQLite.

    Every read returns fresh `QueuedAction` copies; the engine works on
    snapshots, so edits made here never reach a run that already started.
    """

    def __init__(self, db: Database):
        self.db = db
        self.db.init_schema()

    # =========================================================================
    # RAW ENVELOPE
    # =========================================================================

    def _load_envelope(self, subject_id: str) -> QueueEnvelope | None:
        try:
            row = self.db.fetch_one(
                "SELECT version, enabled, actions FROM action_queues WHERE subject_id = ?",
                (subject_id,)
            )
            if row is None:
                return None
            return QueueEnvelope(
                version=row["version"],
                enabled=bool(row["enabled"]),
                actions=from_json(row["actions"]) or [],
            )
        except (sqlite3.Error, ValidationError, json.JSONDecodeError) as e:
            logger.error("Failed to load action queue for %s: %s", subject_id, e)
            raise ResourceLoadError(f"Could not load action queue for {subject_id}") from e

    def _save_envelope(self, subject_id: str, envelope: QueueEnvelope) -> None:
        record = envelope.to_record()
        try:
            with self.db.transaction():
                self.db.execute(
                    """
                    INSERT INTO action_queues (subject_id, version, enabled, actions)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(subject_id) DO UPDATE SET
                        version = excluded.version,
                        enabled = excluded.enabled,
                        actions = excluded.actions
                    """,
                    (subject_id, record["version"], int(record["enabled"]), to_json(record["actions"]))
                )
        except sqlite3.Error as e:
            logger.error("Failed to save action queue for %s: %s", subject_id, e)
            raise ResourceLoadError(f"Could not save action queue for {subject_id}") from e

    # =========================================================================
    # QUEUE OPERATIONS
    # =========================================================================

    def get_queue(self, subject_id: str) -> List[QueuedAction]:
        """Actions in stored order (not sorted)."""
        envelope = self._load_envelope(subject_id)
        return list(envelope.actions) if envelope else []

    def set_queue(self, subject_id: str, actions: List[QueuedAction]) -> None:
        """Replace the queue. The enabled flag is kept; new queues start enabled."""
        current = self._load_envelope(subject_id)
        envelope = QueueEnvelope(
            version=QUEUE_VERSION,
            enabled=current.enabled if current else True,
            actions=actions,
        )
        validate_queue(actions)
        self._save_envelope(subject_id, envelope)
        logger.debug("Action queue updated for %s: %d action(s)", subject_id, len(actions))

    def add_action(self, subject_id: str, action: QueuedAction) -> QueuedAction:
        """Append an action at the end of the queue and return the stored copy."""
        queue = self.get_queue(subject_id)
        added = action.model_copy(update={"order": len(queue)})
        queue.append(added)
        self.set_queue(subject_id, queue)
        return added

    def remove_action(self, subject_id: str, action_id: str) -> bool:
        queue = self.get_queue(subject_id)
        filtered = [a for a in queue if a.id != action_id]
        if len(filtered) == len(queue):
            return False

        # Reorder remaining actions
        for idx, action in enumerate(filtered):
            action.order = idx

        self.set_queue(subject_id, filtered)
        return True

    def update_action(self, subject_id: str, action_id: str, **updates: Any) -> QueuedAction | None:
        """Apply field updates (by field name) to one action. None if the id is unknown."""
        queue = self.get_queue(subject_id)
        for idx, action in enumerate(queue):
            if action.id == action_id:
                queue[idx] = QueuedAction.model_validate({**action.model_dump(), **updates})
                self.set_queue(subject_id, queue)
                return queue[idx]
        return None

    def reorder_actions(self, subject_id: str, action_ids: List[str]) -> None:
        """
        Rebuild the queue in the given id order. Unknown ids are ignored and
        actions left out of `action_ids` are dropped.
        """
        by_id = {a.id: a for a in self.get_queue(subject_id)}
        reordered = []
        for action_id in action_ids:
            action = by_id.get(action_id)
            if action is not None:
                action.order = len(reordered)
                reordered.append(action)
        self.set_queue(subject_id, reordered)

    def clear_queue(self, subject_id: str) -> None:
        self.set_queue(subject_id, [])

    def duplicate_action(self, subject_id: str, action_id: str) -> QueuedAction | None:
        queue = self.get_queue(subject_id)
        original = next((a for a in queue if a.id == action_id), None)
        if original is None:
            return None

        duplicate = original.model_copy(update={
            "id": new_action_id(),
            "name": f"{original.name} (Copy)",
            "order": len(queue),
        }, deep=True)
        queue.append(duplicate)
        self.set_queue(subject_id, queue)
        return duplicate

    def is_queue_enabled(self, subject_id: str) -> bool:
        envelope = self._load_envelope(subject_id)
        return envelope is not None and envelope.enabled

    def set_queue_enabled(self, subject_id: str, enabled: bool) -> None:
        envelope = self._load_envelope(subject_id) or QueueEnvelope(actions=[])
        envelope.enabled = enabled
        self._save_envelope(subject_id, envelope)

    def get_sorted_actions(self, subject_id: str) -> List[QueuedAction]:
        """All actions by ascending order; ties keep stored order."""
        return sorted(self.get_queue(subject_id), key=lambda a: a.order)

    def load_ordered_enabled(self, subject_id: str) -> List[QueuedAction]:
        return [a for a in self.get_sorted_actions(subject_id) if a.enabled]

    # =========================================================================
    # IMPORT / EXPORT
    # =========================================================================

    def export_queue(self, subject_id: str, token_name: str | None = None) -> str:
        export = QueueExport(token_name=token_name, actions=self.get_queue(subject_id))
        return json.dumps(export.to_record(), indent=2)

    def import_queue(self, subject_id: str, json_string: str, append: bool = False) -> List[QueuedAction]:
        """
        Load actions from an export. Every imported action gets a fresh id and
        a dense order: 0..n-1 when replacing, continuing after the existing
        actions when appending. Branch references between imported actions
        follow the new ids; references to anything outside the import are
        cleared.
        """
        try:
            data = json.loads(json_string)
        except json.JSONDecodeError as e:
            raise QueueImportError(f"Queue import is not valid JSON: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("actions"), list):
            raise QueueImportError("Invalid queue data: expected an object with an 'actions' list")

        try:
            imported = [QueuedAction.model_validate(a) for a in data["actions"]]
        except ValidationError as e:
            raise QueueImportError(f"Invalid action record in import: {e}") from e

        queue = self.get_queue(subject_id) if append else []
        start_order = len(queue)

        fresh = [new_action_id() for _ in imported]
        # Branch refs follow the first action that carried the old id
        new_ids: Dict[str, str] = {}
        for action, new_id in zip(imported, fresh):
            new_ids.setdefault(action.id, new_id)
        for idx, (action, new_id) in enumerate(zip(imported, fresh)):
            action.id = new_id
            action.order = start_order + idx
            action.on_success = new_ids.get(action.on_success) if action.on_success else None
            action.on_failure = new_ids.get(action.on_failure) if action.on_failure else None

        queue.extend(imported)
        self.set_queue(subject_id, queue)
        logger.info(
            "Imported %d action(s) for %s (%s)", len(imported), subject_id, "append" if append else "replace"
        )
        return imported

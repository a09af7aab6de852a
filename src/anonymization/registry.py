"""
Live mapping of fields to their assigned anonymizers.

The registry is shared between the configuration side (user edits, remote
updates, migration) and any number of serialization pipelines. Every
operation holds a single mapping-wide lock for exactly one map operation;
anonymizers are returned to the caller and invoked outside the lock.

The registry does not check assignments against the catalog. Callers
assigning on behalf of a user must validate at the selection boundary
(see anonymization.selection).
"""

import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from anonymization.anonymizers import Anonymizer
from anonymization.catalog import FieldRef

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotEntry:
    """One persisted assignment."""

    kind: str
    field: str
    anonymizer: str


class AnonymizerRegistry:
    """Thread-safe mapping of FieldRef to Anonymizer (or None)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._assignments: Dict[FieldRef, Optional[Anonymizer]] = {}

    def assign(self, field_ref: FieldRef, anonymizer: Optional[Anonymizer]) -> None:
        """
        Assign an anonymizer to a field, replacing any previous assignment.

        Args:
            field_ref: Canonical field reference
            anonymizer: Anonymizer to apply, or None for no anonymization
        """
        with self._lock:
            self._assignments[field_ref] = anonymizer

        logger.debug(
            f"Assigned {anonymizer.get_type() if anonymizer else 'none'} to {field_ref}"
        )

    def lookup(self, field_ref: FieldRef) -> Optional[Anonymizer]:
        """Get the anonymizer assigned to a field, or None."""
        with self._lock:
            return self._assignments.get(field_ref)

    def contains(self, field_ref: FieldRef) -> bool:
        """Whether the field has an entry, including an explicit None."""
        with self._lock:
            return field_ref in self._assignments

    def assign_missing(
        self, assignments: Iterable[Tuple[FieldRef, Optional[Anonymizer]]]
    ) -> List[bool]:
        """
        Add assignments only for fields without an entry.

        The whole batch is applied under one lock acquisition.

        Returns:
            For each input pair, whether it was applied
        """
        applied = []
        with self._lock:
            for field_ref, anonymizer in assignments:
                if field_ref in self._assignments:
                    applied.append(False)
                else:
                    self._assignments[field_ref] = anonymizer
                    applied.append(True)
        return applied

    def snapshot(self) -> List[SnapshotEntry]:
        """
        Get the non-empty assignments ordered by kind and field.

        Entries assigned None are omitted.
        """
        with self._lock:
            items = list(self._assignments.items())

        return [
            SnapshotEntry(kind=ref.kind, field=ref.field, anonymizer=anonymizer.get_type())
            for ref, anonymizer in sorted(items, key=lambda item: item[0])
            if anonymizer is not None
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._assignments)

    def __repr__(self) -> str:
        return f"AnonymizerRegistry(entries={len(self)})"

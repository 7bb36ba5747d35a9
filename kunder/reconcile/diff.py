"""Record diffs: what a job intends to change on one record."""
from dataclasses import dataclass, field
from typing import Any, Dict, List

from schemas.customers import CustomerRecord


@dataclass
class RecordDiff:
    """Pending changes for one record, keyed by attribute name."""

    record_id: int
    name: str
    changes: Dict[str, Any] = field(default_factory=dict)
    before: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.changes

    def describe(self) -> List[str]:
        """One 'field: old -> new' line per change."""
        return [
            f'{attr}: {self.before.get(attr)} -> {value}'
            for attr, value in self.changes.items()
        ]


def diff_record(record: CustomerRecord, changes: Dict[str, Any]) -> RecordDiff:
    """
    Build a RecordDiff, dropping changes equal to the current value.

    Several change sets for one record can be merged by passing
    `{**a, **b}`; later sets win.
    """
    effective = {}
    before = {}
    for attr, value in changes.items():
        current = getattr(record, attr)
        if current == value:
            continue
        effective[attr] = value
        before[attr] = current
    return RecordDiff(record_id=record.id, name=record.name, changes=effective, before=before)

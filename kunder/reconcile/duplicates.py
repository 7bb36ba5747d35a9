"""
Duplicate detection and canonical-record selection.

Records sharing a normalized key form a group. The record with the lowest id
(the earliest import) is canonical, the rest are marked for deletion.
"""
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from schemas.customers import CustomerRecord

from .text import normalize_text

KeyFunc = Callable[[CustomerRecord], str]


def duplicate_key(record: CustomerRecord) -> str:
    """normalized(name) | normalized(address)"""
    return f'{normalize_text(record.name)}|{normalize_text(record.address)}'


def name_key(record: CustomerRecord) -> str:
    """Name-only key used when reconciling against the fasit."""
    return normalize_text(record.name)


@dataclass(frozen=True)
class DuplicateGroup:
    """Records sharing one key within one organization."""

    key: str
    organization_id: Optional[int]
    canonical: CustomerRecord
    duplicates: Tuple[CustomerRecord, ...]

    @property
    def duplicate_ids(self) -> Tuple[int, ...]:
        return tuple(r.id for r in self.duplicates)

    @property
    def size(self) -> int:
        return 1 + len(self.duplicates)


def group_ids_by_key(
    records: Iterable[CustomerRecord],
    key: KeyFunc = duplicate_key,
) -> Dict[Tuple[Optional[int], str], Tuple[int, ...]]:
    """
    Map (organization_id, key) to the sorted ids sharing it.

    Organizations are separate partitions: equal names in two tenants are
    never duplicates of each other.
    """
    buckets: Dict[Tuple[Optional[int], str], List[int]] = {}
    for record in records:
        buckets.setdefault((record.organization_id, key(record)), []).append(record.id)
    return {k: tuple(sorted(ids)) for k, ids in buckets.items()}


def find_duplicates(
    records: Iterable[CustomerRecord],
    key: KeyFunc = duplicate_key,
) -> List[DuplicateGroup]:
    """
    Find groups of records sharing a normalized key.

    The result depends only on the keys and ids, never on input order:
    groups are sorted by canonical id and members by id.

    Args:
        records: Customer records (ids required)
        key: Key function, duplicate_key (name|address) or name_key

    Returns:
        One DuplicateGroup per key with at least two records
    """
    records = list(records)
    by_id = {r.id: r for r in records}
    groups = []
    for (org_id, group_key), ids in group_ids_by_key(records, key).items():
        if len(ids) < 2:
            continue
        groups.append(DuplicateGroup(
            key=group_key,
            organization_id=org_id,
            canonical=by_id[ids[0]],
            duplicates=tuple(by_id[i] for i in ids[1:]),
        ))
    return sorted(groups, key=lambda g: g.canonical.id)


def ids_to_delete(groups: Iterable[DuplicateGroup]) -> List[int]:
    """All non-canonical ids, ascending."""
    return sorted(i for g in groups for i in g.duplicate_ids)

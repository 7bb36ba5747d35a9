"""Shared plumbing for the maintenance jobs: results, writes and output."""
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, List, Tuple
import logging
import time

from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.exceptions import DataStoreError
from kunder.reconcile.diff import RecordDiff
from kunder.utils.helpers import banner, format_duration
from schemas.customers import to_store_fields
from schemas.registry import CUSTOMERS_TABLE

logger = logging.getLogger(__name__)

# Number of planned changes listed before the summary
PREVIEW_LIMIT = 20


@dataclass
class JobResult:
    """Counts reported at the end of a run."""

    job: str
    dry_run: bool = True
    examined: int = 0
    planned: int = 0
    updated: int = 0
    deleted: int = 0
    inserted: int = 0
    failed: int = 0
    not_found: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    findings: Counter = field(default_factory=Counter)
    started: float = field(default_factory=time.monotonic)

    def record_failure(self, label: str, message: str) -> None:
        self.failed += 1
        self.failures.append((label, message))
        logger.error(f'{label}: {message}')

    def summary_lines(self) -> List[str]:
        lines = [
            f'Examined: {self.examined}',
            f'Changes planned: {self.planned}',
        ]
        if not self.dry_run:
            lines += [
                f'Updated: {self.updated}',
                f'Deleted: {self.deleted}',
                f'Inserted: {self.inserted}',
                f'Failed: {self.failed}',
            ]
        elif self.failed:
            lines.append(f'Failed: {self.failed}')
        if self.not_found:
            lines.append(f'Not found: {self.not_found}')
        for finding, count in sorted(self.findings.items()):
            lines.append(f'{finding}: {count}')
        lines.append(f'Duration: {format_duration(time.monotonic() - self.started)}')
        return lines


def print_header(title: str, dry_run: bool, commit_flag: str = '--update') -> None:
    mode = f'DRY-RUN (no changes, use {commit_flag} to apply)' if dry_run else 'APPLY'
    print(banner(title))
    print(f'Mode: {mode}\n')


def print_summary(result: JobResult) -> None:
    print('\n' + banner('RESULT'))
    for line in result.summary_lines():
        print(line)
    if result.failures:
        print('\nFailures:')
        for label, message in result.failures:
            print(f'  {label}: {message}')


def preview_diffs(diffs: List[RecordDiff], limit: int = PREVIEW_LIMIT) -> None:
    """Print the first planned diffs."""
    for diff in diffs[:limit]:
        print(f'  [{diff.record_id}] {diff.name}')
        for line in diff.describe():
            print(f'    {line}')
    if len(diffs) > limit:
        print(f'  ... and {len(diffs) - limit} more')


def apply_updates(
    store: SupabaseConnector,
    diffs: Iterable[RecordDiff],
    result: JobResult,
    table: str = CUSTOMERS_TABLE,
) -> None:
    """
    Write each non-empty diff with one update call.

    Nothing is written on a dry run. A failing write is counted and logged
    and the remaining diffs are still applied.
    """
    for diff in diffs:
        if diff.is_empty:
            continue
        result.planned += 1
        if result.dry_run:
            continue
        try:
            store.update_by_id(table, diff.record_id, to_store_fields(diff.changes))
        except DataStoreError as e:
            result.record_failure(f'[{diff.record_id}] {diff.name}', str(e))
        else:
            result.updated += 1


def apply_deletes(
    store: SupabaseConnector,
    ids: Iterable[int],
    result: JobResult,
    table: str = CUSTOMERS_TABLE,
) -> None:
    """Delete rows one by one; failures are counted, not raised."""
    for record_id in ids:
        result.planned += 1
        if result.dry_run:
            continue
        try:
            store.delete_by_id(table, record_id)
        except DataStoreError as e:
            result.record_failure(f'[{record_id}]', f'delete failed: {e}')
        else:
            result.deleted += 1

"""Recompute kunder.kategori from each record's inspection fields."""
from collections import Counter
import logging

from kunder.connectors.supabase_connector import SupabaseConnector
from kunder.extractors.customer_extractor import CustomerExtractor
from kunder.reconcile.category import category_changes
from kunder.reconcile.diff import diff_record

from .common import JobResult, apply_updates, preview_diffs

logger = logging.getLogger(__name__)


def run(store: SupabaseConnector, organization_id: int, dry_run: bool = True) -> JobResult:
    records = CustomerExtractor(store, organization_id).extract()
    result = JobResult('fix_categories', dry_run=dry_run, examined=len(records))

    diffs = []
    transitions = Counter()
    for record in records:
        diff = diff_record(record, category_changes(record))
        if diff.is_empty:
            continue
        diffs.append(diff)
        transitions[f'{record.category or "(empty)"} -> {diff.changes["category"]}'] += 1

    for transition, count in transitions.items():
        result.findings[transition] = count

    preview_diffs(diffs)
    apply_updates(store, diffs, result)
    return result

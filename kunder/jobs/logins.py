"""
Login monitoring for admin users (brukere) and client accounts (klient).

`show_recent` prints the latest logins; `tail` polls for new ones until
interrupted.
"""
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, List, Optional
from zoneinfo import ZoneInfo
import logging
import time

import pandas as pd

from kunder.connectors.supabase_connector import SupabaseConnector, gt, not_null
from kunder.exceptions import DataStoreError
from schemas.registry import CLIENTS_TABLE, USERS_TABLE

logger = logging.getLogger(__name__)

DISPLAY_TZ = ZoneInfo('Europe/Oslo')

# (table, account kind)
LOGIN_SOURCES = ((CLIENTS_TABLE, 'client'), (USERS_TABLE, 'admin'))


@dataclass(frozen=True)
class LoginEvent:
    kind: str
    name: str
    email: str
    at: datetime

    def format(self) -> str:
        local = self.at.astimezone(DISPLAY_TZ)
        label = 'CLIENT' if self.kind == 'client' else 'ADMIN'
        return f'[{local:%d.%m.%Y %H:%M:%S}] {label} LOGIN: {self.name} ({self.email})'


def _parse_timestamp(value) -> datetime:
    # Naive timestamps are stored in UTC
    return pd.to_datetime(value, utc=True).to_pydatetime()


def _events(rows, kind: str) -> List[LoginEvent]:
    return [
        LoginEvent(kind, row.get('navn') or '', row.get('epost') or '', _parse_timestamp(row['sist_innlogget']))
        for row in rows
        if row.get('sist_innlogget')
    ]


def recent_logins(store: SupabaseConnector, limit: int = 5, table: str = CLIENTS_TABLE) -> List[LoginEvent]:
    """Latest logins on one account table, newest first."""
    rows = store.select(
        table,
        columns='navn,epost,sist_innlogget',
        filters={'sist_innlogget': not_null()},
        order='sist_innlogget.desc',
        limit=limit,
    )
    kind = dict(LOGIN_SOURCES).get(table, 'client')
    return _events(rows, kind)


def poll_logins(store: SupabaseConnector, since: datetime) -> List[LoginEvent]:
    """Logins strictly after `since` on both account tables, oldest first."""
    events: List[LoginEvent] = []
    for table, kind in LOGIN_SOURCES:
        rows = store.select(
            table,
            columns='navn,epost,sist_innlogget',
            filters={'sist_innlogget': gt(since.isoformat())},
            order='sist_innlogget',
        )
        events.extend(e for e in _events(rows, kind) if e.at > since)
    return sorted(events, key=lambda e: e.at)


def show_recent(store: SupabaseConnector, limit: int = 5) -> List[LoginEvent]:
    events = recent_logins(store, limit)
    print(f'Last {limit} client logins:')
    if not events:
        print('  (none yet)')
    for event in events:
        print(f'  {event.format()}')
    return events


def tail(
    store: SupabaseConnector,
    interval: float = 5,
    since: Optional[datetime] = None,
    max_polls: Optional[int] = None,
    sleep: Callable[[float], None] = time.sleep,
    emit: Callable[[str], None] = print,
) -> datetime:
    """
    Poll for new logins every `interval` seconds.

    The checkpoint advances to the newest event seen, so a login is reported
    once. A failing poll is logged and retried on the next tick.

    Returns:
        The last checkpoint
    """
    since = since or datetime.now(timezone.utc)
    polls = 0
    while max_polls is None or polls < max_polls:
        polls += 1
        try:
            events = poll_logins(store, since)
        except DataStoreError as e:
            logger.warning(f'Login poll failed: {e}')
            events = []
        for event in events:
            emit(event.format())
            since = max(since, event.at)
        if max_polls is None or polls < max_polls:
            sleep(interval)
    return since

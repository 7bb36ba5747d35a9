"""
Connector for the hosted Supabase data store (PostgREST API).

Filters are passed as PostgREST query parameters; the helper functions below
build the operator strings:

    store.select('kunder', filters={'organization_id': eq(5), 'or': coordinates_missing()})
"""
from typing import Any, Dict, Iterable, List, Optional

import requests

from kunder.config.settings import settings
from kunder.exceptions import DataStoreError, SetupError

from .api_connector import APIConnector

PAGE_SIZE = 1000


def eq(value: Any) -> str:
    return f'eq.{value}'


def gt(value: Any) -> str:
    return f'gt.{value}'


def is_null() -> str:
    return 'is.null'


def not_null() -> str:
    return 'not.is.null'


def ilike(value: str) -> str:
    return f'ilike.{value}'


def coordinates_missing() -> str:
    """`or` filter matching rows where lat or lng is null."""
    return '(lat.is.null,lng.is.null)'


class SupabaseConnector(APIConnector):
    """
    Row-level access to Supabase tables: select, insert, update-by-id,
    delete-by-id and count.

    HTTP failures are raised as DataStoreError so jobs can count them per
    record.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(
            name='supabase',
            base_url=f'{url.rstrip("/")}/rest/v1',
            api_key=service_key,
            timeout=timeout,
            session=session,
        )
        self.service_key = service_key

    @classmethod
    def from_settings(cls) -> 'SupabaseConnector':
        """
        Build a connector from environment settings.

        Raises:
            SetupError: If the URL or key is missing
        """
        missing = settings.validate_required_settings()
        if missing:
            raise SetupError(f'Missing settings: {", ".join(missing)}')
        return cls(settings.SUPABASE_URL, settings.get_service_key(), timeout=settings.HTTP_TIMEOUT)

    def authenticate(self) -> bool:
        super().authenticate()
        self.session.headers.update({'apikey': self.service_key})
        return True

    def _call(
        self,
        method: str,
        table: str,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        try:
            return self.request(method, table, params=params, json=json, headers=headers)
        except requests.HTTPError as e:
            response = e.response
            status = response.status_code if response is not None else None
            text = response.text if response is not None else ''
            raise DataStoreError(
                f'{method} {table} failed ({status}): {text}',
                status_code=status,
                response_text=text,
            ) from e
        except requests.RequestException as e:
            raise DataStoreError(f'{method} {table} failed: {e}') from e

    def select(
        self,
        table: str,
        columns: str = '*',
        filters: Optional[Dict[str, str]] = None,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Read rows, following pages until the result is exhausted.

        Args:
            table: Table name
            columns: PostgREST select list
            filters: Column -> operator string (see eq, gt, is_null, ...)
            order: PostgREST order expression, e.g. 'id' or 'sist_innlogget.desc'
            limit: Maximum rows to return

        Returns:
            List of row dictionaries
        """
        rows: List[Dict[str, Any]] = []
        offset = 0
        while True:
            page_size = PAGE_SIZE if limit is None else min(PAGE_SIZE, limit - len(rows))
            params = {'select': columns, 'limit': page_size, 'offset': offset}
            if filters:
                params.update(filters)
            if order:
                params['order'] = order

            page = self._call('GET', table, params=params).json()
            rows.extend(page)
            offset += len(page)
            if len(page) < page_size or (limit is not None and len(rows) >= limit):
                return rows

    def insert(self, table: str, rows: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert rows and return them as stored."""
        response = self._call(
            'POST', table, json=list(rows),
            headers={'Prefer': 'return=representation'},
        )
        return response.json()

    def update_by_id(self, table: str, record_id: int, fields: Dict[str, Any]) -> None:
        """Update one row by primary key."""
        self._call(
            'PATCH', table, params={'id': eq(record_id)}, json=fields,
            headers={'Prefer': 'return=minimal'},
        )

    def delete_by_id(self, table: str, record_id: int) -> None:
        """Delete one row by primary key."""
        self._call(
            'DELETE', table, params={'id': eq(record_id)},
            headers={'Prefer': 'return=minimal'},
        )

    def count(self, table: str, filters: Optional[Dict[str, str]] = None) -> int:
        """Exact row count from the Content-Range header."""
        params = {'select': '*'}
        if filters:
            params.update(filters)
        response = self._call('HEAD', table, params=params, headers={'Prefer': 'count=exact'})
        content_range = response.headers.get('Content-Range', '')
        total = content_range.rsplit('/', 1)[-1]
        if not total.isdigit():
            raise DataStoreError(f'No count in Content-Range header: {content_range!r}')
        return int(total)

    def has_column(self, table: str, column: str) -> bool:
        """True when the column exists; PostgREST answers 400 for unknown columns."""
        try:
            self._call('GET', table, params={'select': column, 'limit': 1})
        except DataStoreError as e:
            if e.status_code == 400 and column in (e.response_text or ''):
                return False
            raise
        return True

"""Extract customers from the legacy local SQLite database (kunder.db)."""
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

from kunder.exceptions import SetupError

from .base_extractor import BaseExtractor


class LegacySqliteExtractor(BaseExtractor):
    """Read every row of the legacy `kunder` table."""

    def __init__(self, path: Union[str, Path], table: str = 'kunder'):
        super().__init__('legacy_sqlite')
        self.path = Path(path)
        self.table = table

    def extract(self) -> List[Dict[str, Any]]:
        """
        Returns:
            Rows as dictionaries, NULLs as None

        Raises:
            SetupError: If the database file is missing or unreadable
        """
        if not self.path.exists():
            raise SetupError(f'Legacy database not found: {self.path}')

        conn = sqlite3.connect(str(self.path))
        try:
            frame = pd.read_sql_query(f'SELECT * FROM {self.table}', conn)
        except (sqlite3.Error, pd.errors.DatabaseError) as e:
            raise SetupError(f'Cannot read {self.table} from {self.path}: {e}') from e
        finally:
            conn.close()

        frame = frame.astype(object).where(frame.notna(), None)
        rows = frame.to_dict('records')
        self.log_extraction(len(rows))
        return rows

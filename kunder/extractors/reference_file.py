"""
Decoder for the fasit reference file.

The file is a spreadsheet saved as delimited text. A ColumnMapping says how
many header rows to skip, which delimiter and encoding to use and which
column holds which field.
"""
from pathlib import Path
from typing import List, Union

import pandas as pd

from kunder.exceptions import ReferenceFileError
from schemas.reference import ColumnMapping, ReferenceRow

from .base_extractor import BaseExtractor

# Lines are padded to this width so short and long lines decode alike
MAX_COLUMNS = 128


def decode_rows(frame: pd.DataFrame, mapping: ColumnMapping, first_line: int = 1) -> List[ReferenceRow]:
    """
    Turn a raw string DataFrame (header=None) into ReferenceRows.

    Args:
        frame: All cells as strings, one row per line after the skipped header
        mapping: Column layout
        first_line: 1-based file line number of frame's first row

    Returns:
        Rows that carry a usable customer name
    """
    name_column = mapping.columns['name']
    rows = []
    for position, values in enumerate(frame.itertuples(index=False, name=None)):
        cells = [str(v).strip() if v is not None and not pd.isna(v) else '' for v in values]
        # Trailing empty cells may be absent on short lines
        while cells and cells[-1] == '':
            cells.pop()
        if len(cells) < mapping.min_columns or len(cells) <= name_column:
            continue

        name = cells[name_column]
        if (not name
                or name == mapping.header_name
                or len(name) < mapping.min_name_length
                or any(marker in name for marker in mapping.ignored_name_markers)):
            continue

        fields = {
            field: (cells[index] if index < len(cells) and cells[index] else None)
            for field, index in mapping.columns.items()
        }
        fields['name'] = name
        rows.append(ReferenceRow(row_number=first_line + position, **fields))
    return rows


class ReferenceFileExtractor(BaseExtractor):
    """Read and decode a reference file for one ColumnMapping."""

    def __init__(self, path: Union[str, Path], mapping: ColumnMapping):
        super().__init__(f'reference.{mapping.name}')
        self.path = Path(path)
        self.mapping = mapping

    def read_frame(self) -> pd.DataFrame:
        """
        Raw cells of the file after the header rows.

        Raises:
            ReferenceFileError: If the file is missing or cannot be parsed
        """
        if not self.path.exists():
            raise ReferenceFileError(f'Reference file not found: {self.path}')
        try:
            return pd.read_csv(
                self.path,
                sep=self.mapping.delimiter,
                header=None,
                names=list(range(MAX_COLUMNS)),
                skiprows=self.mapping.skip_rows,
                dtype=str,
                keep_default_na=False,
                encoding=self.mapping.encoding,
                skip_blank_lines=False,
                engine='python',
                on_bad_lines='skip',
            )
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise ReferenceFileError(f'Cannot read reference file {self.path}: {e}') from e
        except pd.errors.EmptyDataError:
            return pd.DataFrame()

    def extract(self) -> List[ReferenceRow]:
        frame = self.read_frame()
        rows = decode_rows(frame, self.mapping, first_line=self.mapping.skip_rows + 1)
        self.log_extraction(len(rows))
        return rows

"""
Reference (fasit) file schemas.

The fasit is a spreadsheet export maintained by the customer. Its layout has
changed between generations, so the column positions are described by a
ColumnMapping instead of being hard-coded in the decoder.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# Free-text notes that occasionally end up in the name column
IGNORED_NAME_MARKERS = [
    'Har prøvd',
    'Jeg er i ferd',
    'Jeg kan i tillegg',
    'Det å samle',
    'Jeg ønsker',
    'Alternativt',
    'Mvh ',
]


class ColumnMapping(BaseModel):
    """
    Layout descriptor for one generation of the reference file.

    `columns` maps a ReferenceRow field name to a zero-based column index.
    Fields that a generation does not carry are simply left out.
    """

    name: str = Field(description="Generation label used in log output")
    delimiter: str = Field(default=',', description="Field delimiter")
    skip_rows: int = Field(default=12, description="Header rows before the first customer")
    encoding: str = Field(default='ISO-8859-1', description="File encoding")
    min_columns: int = Field(default=0, description="Rows with fewer columns are skipped")
    min_name_length: int = Field(default=3, description="Shorter names are skipped")
    header_name: str = Field(default='Kunde', description="Name cell value of repeated header rows")
    ignored_name_markers: List[str] = Field(default_factory=lambda: list(IGNORED_NAME_MARKERS))
    columns: Dict[str, int] = Field(description="ReferenceRow field -> column index")


class ReferenceRow(BaseModel):
    """
    One customer line of the reference file, values as raw trimmed text.

    Year/month/frequency cells are parsed by kunder.reconcile.dates.
    """

    row_number: int = Field(description="1-based line number in the source file")
    name: str
    address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    electrical_type: Optional[str] = None
    last_electrical_year: Optional[str] = None
    next_electrical_year: Optional[str] = None
    electrical_month: Optional[str] = None
    electrical_frequency: Optional[str] = None
    last_fire_year: Optional[str] = None
    next_fire_year: Optional[str] = None
    fire_month: Optional[str] = None
    fire_system: Optional[str] = None
    fire_operation_type: Optional[str] = None


# Export dated 01.02.26, comma separated
FASIT_2026 = ColumnMapping(
    name='fasit-2026',
    delimiter=',',
    skip_rows=12,
    min_columns=20,
    columns={
        'electrical_type': 2,
        'last_electrical_year': 3,
        'next_electrical_year': 4,
        'electrical_month': 5,
        'electrical_frequency': 6,
        'last_fire_year': 8,
        'next_fire_year': 9,
        'fire_month': 10,
        'fire_system': 11,
        'fire_operation_type': 13,
        'name': 19,
        'address': 20,
        'postal_code': 21,
        'city': 22,
    },
)

# Spreadsheet dated 12.3.25 saved as semicolon separated text
EXPORT_2025 = ColumnMapping(
    name='export-2025',
    delimiter=';',
    skip_rows=12,
    min_columns=18,
    columns={
        'last_electrical_year': 4,
        'next_electrical_year': 5,
        'electrical_month': 6,
        'last_fire_year': 8,
        'next_fire_year': 9,
        'fire_month': 10,
        'fire_system': 11,
        'fire_operation_type': 12,
        'name': 16,
        'address': 17,
    },
)

MAPPINGS = {
    FASIT_2026.name: FASIT_2026,
    EXPORT_2025.name: EXPORT_2025,
}

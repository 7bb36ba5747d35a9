"""
Customer record schema.

Table: kunder
Purpose: One customer site with its inspection data (El-Kontroll and/or
Brannvarsling) and map coordinates.

Stored column names are Norwegian; the model exposes English attribute names
and keeps the stored names as aliases, so rows from the data store validate
directly and `to_store_fields` converts a change set back.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Category(str, Enum):
    """Inspection category stored in `kunder.kategori`."""
    ELECTRICAL = 'El-Kontroll'
    FIRE = 'Brannvarsling'
    COMBINED = 'El-Kontroll + Brannvarsling'


class GeocodeQuality(str, Enum):
    """Confidence tag for a coordinate pair."""
    EXACT = 'exact'
    AREA = 'area'


# Interval defaults (months) applied when a record carries none
DEFAULT_ELECTRICAL_INTERVAL = 36
DEFAULT_FIRE_INTERVAL = 12
DEFAULT_LEGACY_INTERVAL = 12

DATE_FIELDS = (
    'last_electrical_inspection',
    'next_electrical_inspection',
    'last_fire_inspection',
    'next_fire_inspection',
    'last_inspection',
    'next_inspection',
)


class CustomerRecord(BaseModel):
    """
    Customer row in the hosted data store.

    Invariant: latitude and longitude are either both set or both missing.
    """

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    id: Optional[int] = Field(default=None, description="Primary key, never reassigned")
    organization_id: Optional[int] = Field(default=None, description="Tenant partition key")
    name: str = Field(alias='navn', description="Customer name")
    address: Optional[str] = Field(default=None, alias='adresse')
    postal_code: Optional[str] = Field(default=None, alias='postnummer')
    city: Optional[str] = Field(default=None, alias='poststed')
    phone: Optional[str] = Field(default=None, alias='telefon')
    email: Optional[str] = Field(default=None, alias='epost')
    notes: Optional[str] = Field(default=None, alias='notater')
    latitude: Optional[float] = Field(default=None, alias='lat')
    longitude: Optional[float] = Field(default=None, alias='lng')
    geocode_quality: Optional[str] = Field(default=None, description="exact, area or empty")
    category: Optional[str] = Field(default=None, alias='kategori')
    operating_category: Optional[str] = Field(default=None, alias='driftskategori')

    # El-Kontroll
    electrical_type: Optional[str] = Field(default=None, alias='el_type')
    last_electrical_inspection: Optional[date] = Field(default=None, alias='siste_el_kontroll')
    next_electrical_inspection: Optional[date] = Field(default=None, alias='neste_el_kontroll')
    electrical_interval_months: Optional[int] = Field(default=None, alias='el_kontroll_intervall')

    # Brannvarsling
    fire_system: Optional[str] = Field(default=None, alias='brann_system')
    fire_operation_type: Optional[str] = Field(default=None, alias='brann_driftstype')
    last_fire_inspection: Optional[date] = Field(default=None, alias='siste_brann_kontroll')
    next_fire_inspection: Optional[date] = Field(default=None, alias='neste_brann_kontroll')
    fire_interval_months: Optional[int] = Field(default=None, alias='brann_kontroll_intervall')

    # Legacy single-inspection fields
    last_inspection: Optional[date] = Field(default=None, alias='siste_kontroll')
    next_inspection: Optional[date] = Field(default=None, alias='neste_kontroll')
    legacy_interval_months: Optional[int] = Field(default=None, alias='kontroll_intervall_mnd')

    created_at: Optional[datetime] = Field(default=None, alias='opprettet')

    @field_validator('name', mode='before')
    @classmethod
    def _name_to_str(cls, value: Any) -> str:
        return '' if value is None else str(value)

    @field_validator(*DATE_FIELDS, mode='before')
    @classmethod
    def _truncate_timestamp(cls, value: Any) -> Any:
        # Dates come back as '2024-01-15' or '2024-01-15T00:00:00+00:00'
        if isinstance(value, str):
            value = value.strip()
            if not value:
                return None
            return value[:10]
        return value

    @model_validator(mode='after')
    def _coordinates_paired(self) -> 'CustomerRecord':
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError(
                f'customer {self.id}: latitude and longitude must both be set or both be empty'
            )
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def label(self) -> str:
        """Short identification used in log lines."""
        return f'[{self.id}] {self.name}'


def to_store_fields(changes: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a change set keyed by attribute name to stored column names.

    Dates are serialized as ISO strings and enums by value.
    """
    fields = CustomerRecord.model_fields
    result = {}
    for attr, value in changes.items():
        info = fields.get(attr)
        column = info.alias if info is not None and info.alias else attr
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, (date, datetime)):
            value = value.isoformat()
        result[column] = value
    return result

"""Sort-key whitelists mapping API sort names to SQL columns."""

import enum
import logging
from collections.abc import Mapping

from lims.pagination.builder import normalize_order
from lims.pagination.whitelist import BATCH_FIELDS, REAGENT_FIELDS, FieldWhitelist

logger = logging.getLogger(__name__)


class CursorKind(str, enum.Enum):
    """How a keyset-eligible column's value is carried in a cursor."""

    NUMBER = "number"
    TIMESTAMP = "timestamp"


class SortWhitelist:
    """Resolve a requested sort key to a backing column.

    Unknown keys fall back to ``default`` silently. This is the only place
    an unrecognized identifier is replaced rather than rejected; filter
    field names are always rejected.

    Only keys listed in ``keyset_fields`` may be paginated by cursor. They
    should be backed by an index that includes ``id`` as a tie-break; any
    other key forces offset pagination.
    """

    def __init__(
        self,
        columns: Mapping[str, str],
        default: str,
        keyset_fields: Mapping[str, CursorKind],
        fields: FieldWhitelist,
    ) -> None:
        if default not in columns:
            raise ValueError(f"Default sort key '{default}' is not a sortable field")
        unknown = set(keyset_fields) - set(columns)
        if unknown:
            raise ValueError(f"Keyset fields not sortable: {sorted(unknown)}")
        for column in columns.values():
            fields.validate(column)

        self._columns = dict(columns)
        self._default = default
        self._keyset_fields = dict(keyset_fields)
        self._fields = fields

    @property
    def default(self) -> str:
        return self._default

    def resolve_key(self, field: str | None) -> str:
        """The API sort key actually used for ``field``."""
        if field in self._columns:
            return field
        if field:
            logger.debug(f"Unknown sort field '{field}', using '{self._default}'")
        return self._default

    def validate(self, field: str | None) -> str:
        """SQL column for ``field``, or the default column."""
        return self._columns[self.resolve_key(field)]

    @staticmethod
    def validate_order(order: str | None) -> str:
        return normalize_order(order)

    def supports_keyset(self, field: str | None) -> bool:
        return field in self._keyset_fields

    def cursor_kind(self, field: str | None) -> CursorKind | None:
        return self._keyset_fields.get(field)

    def keyset_keys(self) -> list[str]:
        return list(self._keyset_fields)

    def supported_fields(self) -> list[str]:
        """Sort keys whose backing column passes the resource whitelist."""
        allowed = set(self._fields.filter_fields(self._columns.values()))
        return [key for key, column in self._columns.items() if column in allowed]


REAGENT_SORT_WHITELIST = SortWhitelist(
    columns={
        "name": "name",
        "formula": "formula",
        "cas_number": "cas_number",
        "manufacturer": "manufacturer",
        "status": "status",
        "created_at": "created_at",
        "updated_at": "updated_at",
        "total_quantity": "total_quantity",
        "batches_count": "batches_count",
        "molecular_weight": "molecular_weight",
    },
    default="total_quantity",
    keyset_fields={
        "total_quantity": CursorKind.NUMBER,
        "batches_count": CursorKind.NUMBER,
        "created_at": CursorKind.TIMESTAMP,
    },
    fields=REAGENT_FIELDS,
)

BATCH_SORT_WHITELIST = SortWhitelist(
    columns={
        "batch_number": "batch_number",
        "quantity": "quantity",
        "expiry_date": "expiry_date",
        "received_date": "received_date",
        "status": "status",
        "supplier": "supplier",
        "created_at": "created_at",
        "updated_at": "updated_at",
    },
    default="created_at",
    keyset_fields={
        "quantity": CursorKind.NUMBER,
        "created_at": CursorKind.TIMESTAMP,
    },
    fields=BATCH_FIELDS,
)

"""Field-name validation and per-resource column whitelists.

Column names cannot be bound as SQL parameters, so every identifier that
comes from a request is spliced into SQL text only after passing through
this module. Values are protected separately by binding.
"""

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from lims.constants import (
    DEFAULT_MAX_FIELD_LENGTH,
    DEFAULT_MIN_FIELD_LENGTH,
    SQL_RESERVED_WORDS,
)
from lims.pagination.exceptions import FieldErrorReason, FieldValidationError


@dataclass(frozen=True)
class FieldConfig:
    """Syntactic policy for column-shaped identifiers."""

    max_field_length: int = DEFAULT_MAX_FIELD_LENGTH
    min_field_length: int = DEFAULT_MIN_FIELD_LENGTH
    reserved_words: frozenset[str] = field(default=SQL_RESERVED_WORDS)
    allow_dot: bool = False
    allow_brackets: bool = False
    allow_leading_underscore: bool = False

    @classmethod
    def strict(cls) -> "FieldConfig":
        return cls(max_field_length=32, min_field_length=2)

    @classmethod
    def for_reports(cls) -> "FieldConfig":
        """Allow ``alias.column`` names used by report queries."""
        return cls(max_field_length=64, allow_dot=True)

    @classmethod
    def for_table_names(cls) -> "FieldConfig":
        return cls(max_field_length=128, allow_dot=True)

    def with_options(self, **changes) -> "FieldConfig":
        return replace(self, **changes)


DEFAULT_FIELD_CONFIG = FieldConfig()


def _fail(name: str, reason: FieldErrorReason, detail: str) -> FieldValidationError:
    return FieldValidationError(name, reason, detail)


def validate_field_name(name: str, config: FieldConfig = DEFAULT_FIELD_CONFIG) -> None:
    """Check that ``name`` is safe to splice into SQL as an identifier.

    Rules are checked in order and the first failure is raised.

    Raises:
        FieldValidationError: With ``reason`` naming the rule that failed
    """
    if not name:
        raise _fail(name, FieldErrorReason.EMPTY, "Field name cannot be empty")
    if len(name) < config.min_field_length:
        raise _fail(
            name,
            FieldErrorReason.TOO_SHORT,
            f"Field name too short (min: {config.min_field_length})",
        )
    if len(name) > config.max_field_length:
        raise _fail(
            name,
            FieldErrorReason.TOO_LONG,
            f"Field name too long (max: {config.max_field_length})",
        )

    first = name[0]
    if not ((first.isascii() and first.isalpha()) or (first == "_" and config.allow_leading_underscore)):
        raise _fail(name, FieldErrorReason.INVALID_START, "Field name must start with a letter")

    for char in name[1:]:
        if char.isascii() and (char.isalnum() or char == "_"):
            continue
        if char == "." and config.allow_dot:
            continue
        if char in "[]" and config.allow_brackets:
            continue
        raise _fail(name, FieldErrorReason.INVALID_CHARACTER, f"Invalid character: '{char}'")

    if config.allow_dot:
        segments = name.split(".")
        if len(segments) > 2 or not all(segments):
            raise _fail(
                name,
                FieldErrorReason.INVALID_FORMAT,
                "Invalid format: expected 'column' or 'alias.column'",
            )
    else:
        segments = [name]

    if config.allow_brackets and (name.count("[") > 1 or name.count("[") != name.count("]")
                                  or name.find("[") > name.find("]")):
        raise _fail(name, FieldErrorReason.INVALID_FORMAT, "Invalid format: unbalanced brackets")

    if "__" in name:
        raise _fail(
            name,
            FieldErrorReason.CONSECUTIVE_UNDERSCORES,
            "Cannot have consecutive underscores",
        )

    for segment in (name, *segments):
        if segment.upper() in config.reserved_words:
            raise _fail(name, FieldErrorReason.RESERVED_WORD, f"Reserved SQL word: '{segment}'")


def is_safe_field_name(name: str, config: FieldConfig = DEFAULT_FIELD_CONFIG) -> bool:
    try:
        validate_field_name(name, config)
    except FieldValidationError:
        return False
    return True


class FieldWhitelist:
    """Exact allow-list of column names for one resource.

    Instances are built once at import and shared read-only. ``add_field``
    and ``remove_field`` swap in a new frozen set under a lock, so readers
    never observe a half-updated allow-list.
    """

    def __init__(self, fields: Iterable[str], config: FieldConfig = DEFAULT_FIELD_CONFIG) -> None:
        self._fields = frozenset(fields)
        self._config = config
        self._lock = threading.Lock()

    @property
    def config(self) -> FieldConfig:
        return self._config

    @property
    def allowed_fields(self) -> frozenset[str]:
        return self._fields

    def is_allowed(self, field: str) -> bool:
        """True if ``field`` is well-formed and an exact member."""
        return is_safe_field_name(field, self._config) and field in self._fields

    def validate(self, field: str) -> None:
        """Raise FieldValidationError unless ``field`` is allowed."""
        try:
            validate_field_name(field, self._config)
        except FieldValidationError as e:
            raise FieldValidationError(field, e.reason, f"Field '{field}': {e.detail}") from e

        if field not in self._fields:
            raise FieldValidationError(
                field,
                FieldErrorReason.NOT_IN_WHITELIST,
                f"Field '{field}' not in whitelist",
            )

    def filter_fields(self, fields: Iterable[str]) -> list[str]:
        """Keep only allowed fields, preserving input order."""
        return [f for f in fields if self.is_allowed(f)]

    def add_field(self, field: str) -> None:
        with self._lock:
            self._fields = self._fields | {field}

    def remove_field(self, field: str) -> None:
        with self._lock:
            self._fields = self._fields - {field}

    def __contains__(self, field: object) -> bool:
        return isinstance(field, str) and self.is_allowed(field)

    def __repr__(self) -> str:
        return f"FieldWhitelist({sorted(self._fields)!r})"


# =============================================================================
# Resource whitelists
# =============================================================================

_AUDIT_FIELDS = ("created_by", "updated_by", "created_at", "updated_at")

REAGENT_FIELDS = FieldWhitelist([
    "id", "name", "formula", "cas_number", "manufacturer", "molecular_weight",
    "physical_state", "description", "status", "total_quantity",
    "reserved_quantity", "available_quantity", "batches_count", "total_display",
    "deleted_at", *_AUDIT_FIELDS,
])

BATCH_FIELDS = FieldWhitelist([
    "id", "reagent_id", "batch_number", "quantity", "original_quantity",
    "reserved_quantity", "unit", "expiry_date", "supplier", "manufacturer",
    "received_date", "status", "location", "notes", "cat_number", "deleted_at",
    *_AUDIT_FIELDS,
])

EQUIPMENT_FIELDS = FieldWhitelist([
    "id", "name", "model", "serial_number", "manufacturer", "description",
    "type_", "status", "location", "purchase_date", "warranty_until",
    "last_maintenance", "next_maintenance", "maintenance_interval_days", "notes",
    *_AUDIT_FIELDS,
])

EQUIPMENT_PART_FIELDS = FieldWhitelist([
    "id", "equipment_id", "name", "part_number", "quantity", "status",
    "description", "last_replacement", "next_replacement",
    "replacement_interval_days", "image_path", "notes", *_AUDIT_FIELDS,
])

EQUIPMENT_MAINTENANCE_FIELDS = FieldWhitelist([
    "id", "equipment_id", "maintenance_type", "scheduled_date", "completed_date",
    "performed_by", "status", "description", "cost", "notes", "part_id",
    *_AUDIT_FIELDS,
])

EQUIPMENT_FILE_FIELDS = FieldWhitelist([
    "id", "equipment_id", "file_type", "filename", "original_filename",
    "file_path", "file_size", "mime_type", "description", "uploaded_by",
    "uploaded_at",
])

ROOM_FIELDS = FieldWhitelist([
    "id", "name", "description", "capacity", "color", "status", *_AUDIT_FIELDS,
])

EXPERIMENT_FIELDS = FieldWhitelist([
    "id", "title", "description", "experiment_date", "instructor",
    "student_group", "location", "status", "protocol", "start_date", "end_date",
    "results", "notes", "experiment_type", "room_id", *_AUDIT_FIELDS,
])

REPORT_FIELDS = FieldWhitelist(
    [
        "id", "reagent_id", "reagent_name", "batch_number", "cat_number",
        "quantity", "original_quantity", "reserved_quantity", "unit",
        "expiry_date", "supplier", "manufacturer", "received_date", "status",
        "location", "notes", "days_until_expiry", "expiration_status",
        "created_at", "updated_at",
        # Qualified columns: b = batches, r = reagents
        "b.id", "b.reagent_id", "b.batch_number", "b.cat_number", "b.quantity",
        "b.original_quantity", "b.reserved_quantity", "b.unit", "b.expiry_date",
        "b.supplier", "b.manufacturer", "b.received_date", "b.status",
        "b.location", "b.notes", "b.created_at", "b.updated_at",
        "r.name", "r.id", "r.formula", "r.cas_number",
    ],
    FieldConfig.for_reports(),
)

RESOURCE_WHITELISTS: dict[str, FieldWhitelist] = {
    "reagents": REAGENT_FIELDS,
    "batches": BATCH_FIELDS,
    "equipment": EQUIPMENT_FIELDS,
    "equipment_parts": EQUIPMENT_PART_FIELDS,
    "equipment_maintenance": EQUIPMENT_MAINTENANCE_FIELDS,
    "equipment_files": EQUIPMENT_FILE_FIELDS,
    "rooms": ROOM_FIELDS,
    "experiments": EXPERIMENT_FIELDS,
    "reports": REPORT_FIELDS,
}

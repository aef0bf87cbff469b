"""Status and type enumerations for laboratory records."""

import enum
from typing import Self


class NamedEnum(str, enum.Enum):
    """String enum with case-insensitive lookup by canonical value."""

    @classmethod
    def parse(cls, value: str | None) -> Self | None:
        """Member whose value matches ``value`` ignoring case, else None."""
        if value is None:
            return None
        return cls._value2member_map_.get(value.strip().lower())

    @classmethod
    def is_valid(cls, value: str | None) -> bool:
        return cls.parse(value) is not None

    @classmethod
    def all_values(cls) -> list[str]:
        return [member.value for member in cls]

    def __str__(self) -> str:
        return self.value


class ReagentStatus(NamedEnum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class BatchStatus(NamedEnum):
    AVAILABLE = "available"
    LOW_STOCK = "low_stock"
    EXPIRED = "expired"
    RESERVED = "reserved"
    DEPLETED = "depleted"


class RoomStatus(NamedEnum):
    """Room lifecycle.

    available -> reserved -> occupied while an experiment runs; maintenance
    and unavailable take the room out of scheduling.
    """

    AVAILABLE = "available"
    RESERVED = "reserved"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"
    UNAVAILABLE = "unavailable"


class ExperimentStatus(NamedEnum):
    DRAFT = "draft"
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EquipmentType(NamedEnum):
    """Kind of equipment. ``labware`` is kept for older records."""

    EQUIPMENT = "equipment"
    LABWARE = "labware"
    INSTRUMENT = "instrument"
    GLASSWARE = "glassware"
    SAFETY = "safety"
    STORAGE = "storage"
    CONSUMABLE = "consumable"
    OTHER = "other"


class EquipmentStatus(NamedEnum):
    AVAILABLE = "available"
    IN_USE = "in_use"
    MAINTENANCE = "maintenance"
    DAMAGED = "damaged"
    CALIBRATION = "calibration"
    RETIRED = "retired"


_PDF = "application/pdf"
_DOC = "application/msword"
_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class EquipmentFileType(NamedEnum):
    MANUAL = "manual"
    IMAGE = "image"
    CERTIFICATE = "certificate"
    SPECIFICATION = "specification"
    MAINTENANCE_LOG = "maintenance_log"
    OTHER = "other"

    @property
    def allowed_mime_types(self) -> tuple[str, ...]:
        return _FILE_MIME_TYPES[self]

    def is_mime_type_allowed(self, mime_type: str) -> bool:
        return mime_type in self.allowed_mime_types


_FILE_MIME_TYPES = {
    EquipmentFileType.MANUAL: (_PDF, _DOC, _DOCX, "text/plain"),
    EquipmentFileType.IMAGE: ("image/jpeg", "image/png", "image/gif", "image/webp", "image/svg+xml"),
    EquipmentFileType.CERTIFICATE: (_PDF, "image/jpeg", "image/png"),
    EquipmentFileType.SPECIFICATION: (
        _PDF,
        _DOC,
        _DOCX,
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ),
    EquipmentFileType.MAINTENANCE_LOG: (_PDF, "text/plain", "text/csv"),
    EquipmentFileType.OTHER: (_PDF, "application/octet-stream"),
}


class MaintenanceType(NamedEnum):
    SCHEDULED = "scheduled"
    UNSCHEDULED = "unscheduled"
    CALIBRATION = "calibration"
    REPAIR = "repair"
    INSPECTION = "inspection"
    CLEANING = "cleaning"
    PART_REPLACEMENT = "part_replacement"


class MaintenanceStatus(NamedEnum):
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    OVERDUE = "overdue"


class PartStatus(NamedEnum):
    GOOD = "good"
    NEEDS_ATTENTION = "needs_attention"
    NEEDS_REPLACEMENT = "needs_replacement"
    REPLACED = "replaced"
    MISSING = "missing"

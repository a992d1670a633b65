"""Export pipeline: classify -> detect shape -> transform -> serialize."""

from .classifier import is_date_value, is_time_value, transform_date
from .detector import detect_shape
from .serializer import BOM, serialize_document, write_payload
from .transformer import ATTENDANCE_COLUMNS, transform_for_export

__all__ = [
    "is_time_value",
    "is_date_value",
    "transform_date",
    "detect_shape",
    "transform_for_export",
    "ATTENDANCE_COLUMNS",
    "serialize_document",
    "write_payload",
    "BOM",
]

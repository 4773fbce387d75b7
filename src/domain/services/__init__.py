# Domain Services
from .anonymizer import NAME_PLACEHOLDER, anonymize_student, build_anonymized_view
from .completion_scorer import (
    calculate_completion_score,
    get_completion_tips,
    get_validation_report,
)
from .masking_service import mask_sensitive_data

__all__ = [
    "NAME_PLACEHOLDER",
    "anonymize_student",
    "build_anonymized_view",
    "calculate_completion_score",
    "get_completion_tips",
    "get_validation_report",
    "mask_sensitive_data",
]

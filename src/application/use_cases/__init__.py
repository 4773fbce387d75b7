# Use Cases Package
from .identity_resolver import IdentityResolver
from .profile_merge import FinalizeResult, ProfileMergeUseCase, ReplaceResult
from .intake_session import CVUploadResult, IntakeSessionService, StudentPage

__all__ = [
    "IdentityResolver",
    "ProfileMergeUseCase",
    "FinalizeResult",
    "ReplaceResult",
    "IntakeSessionService",
    "CVUploadResult",
    "StudentPage",
]

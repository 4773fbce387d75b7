# Interfaces Package
from .ai_port import AIPort
from .storage_port import StoragePort

__all__ = ["AIPort", "StoragePort"]

"""Registry domain exports."""

from .policy import (
	RegistryConflictError,
	RegistryError,
	RegistryNotFoundError,
	RegistryPermissionError,
	RegistryValidationError,
)
from .service import RegistryService
from .store import RegistryStore

__all__ = [
	"RegistryConflictError",
	"RegistryError",
	"RegistryNotFoundError",
	"RegistryPermissionError",
	"RegistryService",
	"RegistryStore",
	"RegistryValidationError",
]

from .backup import BackupStore, generate_checksum
from .errors import BackupError, BackupNotFoundError, MigrationError, PersistenceError
from .services import DataMigrationService, MigrationResult
from .validators import EntityError, validate_input_data

__all__ = [
    "BackupStore",
    "generate_checksum",
    "BackupError",
    "BackupNotFoundError",
    "MigrationError",
    "PersistenceError",
    "DataMigrationService",
    "MigrationResult",
    "EntityError",
    "validate_input_data",
]

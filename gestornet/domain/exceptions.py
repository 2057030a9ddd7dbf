"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ValidationError(DomainException):
    """Input rejected before any state mutation"""

    pass


class InvalidCodeFormatError(ValidationError):
    """Client code does not match the <Letter><Digits> format"""

    pass


class AuthorizationError(DomainException):
    """Wrong boss password, wrong current password, or forbidden target"""

    pass


class InvalidCredentialsError(AuthorizationError):
    """Login name/password pair did not match any manager"""

    pass


class DuplicateManagerError(DomainException):
    """A manager with the same name (case-insensitive) already exists"""

    pass


class ClientNotFoundError(DomainException):
    """No client with the given id"""

    pass


class SetupRequiredError(DomainException):
    """Boss configuration has not been created yet"""

    pass


class SetupAlreadyCompleteError(DomainException):
    """Initial setup was already completed"""

    pass


class BackupError(DomainException):
    """Backup document is invalid or the restore could not be applied"""

    pass


class BackupRestoreError(BackupError):
    """Backup was valid but the store could not apply it (nothing changed)"""

    pass


class DomainError(Exception):
    """Base exception for all domain errors.
    This is the root exception for all domain layer errors. The HTTP layer
    converts it to an appropriate response.
    """
    def __init__(self, message: str | None = None):
        """Initialize domain error with message.
        Args:
            message: Error message describing what went wrong.
        """
        super().__init__(message or "Domain error")


class NotFoundError(DomainError):
    """Exception raised when a requested resource is not found in the domain."""
    pass


class ReleaseNotFoundError(NotFoundError):
    """Release metadata does not exist for the identifier."""
    pass


class ArtifactNotFoundError(NotFoundError):
    """Release metadata exists but its binary blob is gone."""
    pass


class LinkNotFoundError(NotFoundError):
    pass


class SubscriberNotFoundError(NotFoundError):
    pass


class ConflictError(DomainError):
    """Exception raised when a domain operation conflicts with existing state."""
    pass


class IdentifierExhaustedError(ConflictError):
    """No free release identifier was found within the attempt budget."""
    pass


class ValidationError(DomainError):
    """Exception raised when domain data fails validation rules."""
    pass


class StorageError(DomainError):
    """Exception raised when the artifact root cannot be read or written."""
    pass

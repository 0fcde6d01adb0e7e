class CardRecoError(Exception):
    """Base class for recommendation engine errors."""


class CollaboratorUnavailable(CardRecoError):
    """
    A storage collaborator (catalog, order history, customers) could not be read.
    Not recoverable locally; callers should retry later.
    """

    def __init__(self, collaborator: str, operation: str, cause: Exception | None = None):
        self.collaborator = collaborator
        self.operation = operation
        self.cause = cause
        super().__init__(f"{collaborator}.{operation} failed: {cause}")


class GenerationFailed(CardRecoError):
    """The text-completion collaborator failed or returned nothing usable."""

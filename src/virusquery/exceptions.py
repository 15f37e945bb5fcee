"""Exception hierarchy for virusquery."""


class VirusQueryError(Exception):
    """Base exception for all virusquery errors."""

    pass


class InputValidationError(VirusQueryError):
    """Raised for a recoverable problem with a single input item.

    Resolvers never let this escape; it is converted into a validation
    result and reported next to the data that could be produced.
    """

    def __init__(self, message: str, item: str | None = None) -> None:
        self.message = message
        self.item = item
        super().__init__(message)


class UnsupportedSourceError(VirusQueryError):
    """Raised when a resolver cannot extract mutations from its source object."""

    pass


class SchemaBuildError(VirusQueryError):
    """Raised when building the schema of one virus fails."""

    def __init__(self, key: str, message: str) -> None:
        self.key = key
        super().__init__(f"Failed to build schema for {key}: {message}")


class UnknownVirusError(VirusQueryError, KeyError):
    """Raised when a virus name is not registered."""

    def __str__(self) -> str:
        return f"Unknown virus: {self.args[0]}"


class SchemaLookupError(VirusQueryError, KeyError):
    """Raised for an unknown type or field name."""

    def __str__(self) -> str:
        return str(self.args[0])


class ArgumentError(VirusQueryError):
    """Raised for an unrecognized argument or an invalid enum argument value."""

    pass


class CollaboratorUnavailableError(VirusQueryError):
    """Raised by collaborators for transient failures that are worth retrying."""

    pass

"""
Exception hierarchy for the anonymization engine.

Transform failures are fatal to a serialization attempt and propagate to the
caller. Migration and snapshot problems are reported per entry and never
abort a load.
"""


class AnonymizationError(Exception):
    """Base exception for anonymization errors."""

    pass


class TransformExecutionError(AnonymizationError):
    """Raised when an anonymizer fails while a record is being serialized."""

    def __init__(self, field_ref, anonymizer_name: str, cause: Exception):
        self.field_ref = field_ref
        self.anonymizer_name = anonymizer_name
        self.cause = cause
        # Never include the field value: it is the data being protected.
        super().__init__(
            f"Anonymizer {anonymizer_name} failed on {field_ref}: "
            f"{type(cause).__name__}"
        )


class UnknownAnonymizerError(AnonymizationError, LookupError):
    """Raised when an anonymizer name cannot be resolved."""

    pass


class UnknownKindError(AnonymizationError, LookupError):
    """Raised when a datum kind is not registered."""

    pass


class UnknownFieldError(AnonymizationError, LookupError):
    """Raised when a field is not emitted by its datum kind."""

    pass


class LegacyEntryError(AnonymizationError, ValueError):
    """Raised for a single malformed legacy registry entry."""

    def __init__(self, entry: str, reason: str):
        self.entry = entry
        self.reason = reason
        super().__init__(f"Invalid legacy entry {entry!r}: {reason}")


class RegistryDocumentError(AnonymizationError, ValueError):
    """Raised when a persisted registry document does not match its schema."""

    pass


class ConfigurationError(AnonymizationError, ValueError):
    """Raised when a selection does not match the field's declared anonymizers."""

    pass

"""Error types surfaced to users of the Compliance Companion service."""


class ComplianceError(Exception):
    """Base class for all errors shown to the user as a dismissible message."""
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ComplianceError):
    """Out-of-range percentage or empty required field."""


class CSVError(ComplianceError):
    """An uploaded CSV file could not be turned into a percentage."""


class FormatError(CSVError):
    pass


class SchemaError(CSVError):
    pass


class NoDataError(CSVError):
    pass


class NotFoundError(ComplianceError):
    status_code = 404


class AuthenticationError(ComplianceError):
    status_code = 401


class StorageError(ComplianceError):
    """Any failure reported by the tabular store."""
    status_code = 503

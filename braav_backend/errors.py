class BraavError(Exception):
    """Base class for every error the service reports to a caller."""

    status_code = 500


class ConfigurationError(BraavError):
    """A required setting or request field is missing or malformed."""

    status_code = 400

    def __init__(self, message, fields=None):
        super().__init__(message)
        self.fields = list(fields or [])


class RemoteCallError(BraavError):
    """The node rejected a call or the transaction did not succeed."""

    def __init__(self, message, digest=None):
        super().__init__(message)
        self.digest = digest


class ObjectNotFoundError(BraavError):
    """A successful response did not contain the expected object."""

    def __init__(self, message, digest=None):
        super().__init__(message)
        self.digest = digest

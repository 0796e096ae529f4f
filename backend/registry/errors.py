"""Error taxonomy shared by the store, the record service and the routes."""


class RegistryError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self):
        return {'error': self.message}


class ValidationError(RegistryError):
    status_code = 400


class NotFoundError(RegistryError):
    status_code = 404


class StoreError(RegistryError):
    status_code = 500


class EncodingError(StoreError):
    """A stored value that does not decode to a well-formed record."""


class ConfigError(RegistryError):
    """Raised at startup when the store cannot be configured."""

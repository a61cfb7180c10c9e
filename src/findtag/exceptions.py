class FindTagError(Exception):
    """Base exception for all fatal find-tag errors."""


class ConfigurationError(FindTagError):
    pass


class InvalidReferenceError(ConfigurationError):
    pass


class AuthenticationError(FindTagError):
    pass


class RegistryError(FindTagError):
    pass


class RegistryHTTPError(RegistryError):
    def __init__(self, status_code: int, url: str) -> None:
        self.status_code = status_code
        self.url = url
        super().__init__(f"Error {status_code} from: {url}")


class TransportError(FindTagError):
    pass


class MissingDigestError(FindTagError):
    pass

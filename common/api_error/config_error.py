# common/api_error/config_error.py
class ConfigurationError(RuntimeError):
    """
    Raised at startup when environment configuration is missing or invalid.

    Never mapped to an HTTP response: the process refuses to start instead.
    """


__all__ = ["ConfigurationError"]

class ScoreLabError(Exception):
    """Base class for errors raised by scorelab."""


class ConfigurationError(ScoreLabError, ValueError):
    """A step, chain or filter definition is not usable."""


class UnsupportedMethodError(ConfigurationError):
    """The requested analysis method is not registered."""

    def __init__(self, method_id, available=None):
        self.method_id = method_id
        self.available = list(available or [])
        message = f"Unknown analysis method '{method_id}'."
        if self.available:
            message += f" Available methods: {self.available}"
        super().__init__(message)

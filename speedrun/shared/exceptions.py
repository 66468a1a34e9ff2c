"""Custom exceptions for Ollama Speedrun."""
from typing import Optional


class SpeedrunError(Exception):
    """Base exception for all pipeline errors."""
    pass


class RequestError(SpeedrunError):
    """Exception raised when a request to an Ollama host fails at transport level."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class InvalidResponseFormatError(SpeedrunError):
    """Exception raised when a response body is not in the expected format."""
    pass


class EnumerationError(SpeedrunError):
    """Exception raised when a host's model list cannot be obtained."""
    pass


class ModelValidationError(SpeedrunError):
    """Exception raised when a listed model fails the show call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BenchmarkExecutionError(SpeedrunError):
    """Exception raised when a generation request is rejected."""

    def __init__(self, message: str, status_code: Optional[int] = None, hint: str = ""):
        super().__init__(f"{message}{hint}")
        self.status_code = status_code
        self.hint = hint

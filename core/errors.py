"""Exception types for drupdate."""


class DrupdateError(Exception):
    """Base class for errors that abort a run."""


class ConfigValidationError(DrupdateError):
    """Raised when a configuration value is invalid."""


class MissingPrerequisiteError(DrupdateError):
    """Raised when a required file or executable is missing."""


class ComposerError(DrupdateError):
    """Raised when Composer output cannot be obtained or understood."""

    def __init__(self, message: str, output: str = "") -> None:
        self.output = output
        super().__init__(message)

"""Error types raised while assembling a bundle."""


class PackagingError(RuntimeError):
    """Base error for packaging failures."""


class MissingInputError(PackagingError):
    """Raised when a required file or directory is absent."""


class PackagingIOError(PackagingError):
    """Raised when a copy, move, mkdir or delete fails."""


class ToolUnavailableError(PackagingError):
    """Raised when an external tool can't be found and nothing is bundled for it."""


class ToolFailedError(PackagingError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str = ""):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(f"Command '{command}' failed with return code {returncode}")


class MalformedMetadataError(PackagingError):
    """Raised when application metadata is missing or can't be parsed."""

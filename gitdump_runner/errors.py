"""Error definitions for gitdump_runner.

Every error carries a stable ``code`` so the CLI and logs can report
failures consistently. All errors are fatal to a run; nothing retries.
"""


class GitDumpError(Exception):
    """Base error for all dump run failures."""

    def __init__(self, message: str, code: str = "gitdump_error") -> None:
        """Initialize GitDumpError.

        Args:
            message: Error description.
            code: Error code for structured error handling.
        """
        super().__init__(message)
        self.code = code


class ConfigError(GitDumpError):
    """Raised when the URL or output directory cannot be resolved."""

    def __init__(self, message: str, code: str = "config_error") -> None:
        super().__init__(message, code=code)


class EngineConnectionError(GitDumpError):
    """Raised when the Docker engine cannot be reached."""

    def __init__(self, message: str, code: str = "engine_unavailable") -> None:
        super().__init__(message, code=code)


class BuildContextError(GitDumpError):
    """Raised when the build context archive cannot be opened."""

    def __init__(self, message: str, code: str = "context_unavailable") -> None:
        super().__init__(message, code=code)


class ImageBuildError(GitDumpError):
    """Raised when the image build fails or yields no image."""

    def __init__(self, message: str, code: str = "build_failed") -> None:
        super().__init__(message, code=code)


class ImageIdError(ImageBuildError):
    """Raised when the engine reports an image ID we cannot parse."""

    def __init__(self, message: str, code: str = "invalid_image_id") -> None:
        super().__init__(message, code=code)


class StreamDecodeError(GitDumpError):
    """Raised when the build event stream is not valid JSON."""

    def __init__(self, message: str, code: str = "stream_decode_error") -> None:
        super().__init__(message, code=code)


class ContainerError(GitDumpError):
    """Raised when a container lifecycle call fails."""

    def __init__(self, message: str, code: str = "container_error") -> None:
        super().__init__(message, code=code)


__all__ = [
    "BuildContextError",
    "ConfigError",
    "ContainerError",
    "EngineConnectionError",
    "GitDumpError",
    "ImageBuildError",
    "ImageIdError",
    "StreamDecodeError",
]

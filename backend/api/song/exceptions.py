"""
Custom exceptions for the song generation pipeline.
"""


class SongGenerationError(Exception):
    """Base exception for all song generation errors.

    The message of these exceptions is safe to show to the end user and is
    what ends up in a failed job's ``error_message``.
    """
    pass


class ProviderError(SongGenerationError):
    """Exception raised for transient errors talking to the generation provider."""
    pass


class TerminalSongError(SongGenerationError):
    """Base exception for failures that must not be retried by the queue."""
    pass


class ProviderFailedError(TerminalSongError):
    """Exception raised when the provider reports the generation as failed."""
    pass


class GenerationTimeoutError(TerminalSongError):
    """Exception raised when the provider does not finish before the poll ceiling."""
    pass


class AudioProcessingError(TerminalSongError):
    """Exception raised when the preview clip cannot be produced."""
    pass


class GenerationConfigError(SongGenerationError):
    """Exception raised when the generation client is misconfigured."""
    pass


class QueueUnavailableError(SongGenerationError):
    """Exception raised when a job cannot be handed to the worker queue."""
    pass


class JobNotFoundError(LookupError):
    """Exception raised when a job id does not exist in the job store."""
    pass


class InvalidTransitionError(ValueError):
    """Exception raised for a status change or field write the job lifecycle forbids."""
    pass

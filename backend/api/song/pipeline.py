"""
Song generation job orchestration.

One ``SongPipeline.run`` call processes one delivery of a queued job:

1. Mark the job processing
2. Reuse the artifacts of a succeeded job with the same input hash, if any
3. Render and filter lyrics, submit them, and record the provider request id
4. Poll the provider at a fixed interval up to a fixed number of attempts
5. Store the full track and a preview, build the LRC and mark the job succeeded

Any error in steps 2-5 marks the job failed with a single user-facing message
and is re-raised so the queue can apply its retry policy.
"""
import logging
import time
from dataclasses import dataclass

from .exceptions import (
    GenerationTimeoutError,
    ProviderError,
    ProviderFailedError,
    SongGenerationError,
)
from .generation import FAILED as PROVIDER_FAILED
from .generation import SUCCEEDED as PROVIDER_SUCCEEDED
from .generation import StyleParams
from .lrc import build_lrc
from .lyrics import filter_content, render_lyrics
from .states import FAILED, PROCESSING, SUCCEEDED
from .storage import AUDIO_BUCKET, PREVIEW_BUCKET
from .utils import generate_storage_key

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Unexpected error while generating song"


@dataclass(frozen=True)
class PipelineConfig:
    poll_interval: float = 5
    max_poll_attempts: int = 60
    default_duration_sec: int = 45
    preview_format: str = 'mp3'

    @classmethod
    def from_settings(cls, settings):
        return cls(
            poll_interval=getattr(settings, 'SONG_POLL_INTERVAL', cls.poll_interval),
            max_poll_attempts=getattr(settings, 'SONG_MAX_POLL_ATTEMPTS', cls.max_poll_attempts),
            default_duration_sec=getattr(settings, 'SONG_DEFAULT_DURATION', cls.default_duration_sec),
            preview_format=getattr(settings, 'SONG_PREVIEW_FORMAT', cls.preview_format),
        )


def user_message(exc):
    """Message safe to store on the job for an exception."""
    if isinstance(exc, SongGenerationError) and str(exc):
        return str(exc)
    return UNEXPECTED_ERROR_MESSAGE


class SongPipeline:
    """State machine that takes a queued job to succeeded or failed."""

    def __init__(self, store, client, storage, post_processor, renderer=render_lyrics,
                 config=None, sleep=time.sleep):
        """
        Initialize the pipeline.

        Args:
            store: Job store (``MemoryJobStore`` or ``DjangoJobStore``)
            client: Generation client with ``submit`` and ``poll``
            storage (ObjectStorage): Where audio artifacts are written
            post_processor (AudioPostProcessor): Preview clip maker
            renderer (callable): ``GenerationRequest -> str`` lyrics renderer
            config (PipelineConfig, optional): Polling and output settings
            sleep (callable): Called with the poll interval between polls
        """
        self.store = store
        self.client = client
        self.storage = storage
        self.post_processor = post_processor
        self.renderer = renderer
        self.config = config or PipelineConfig()
        self.sleep = sleep

    def run(self, job_id, request):
        """
        Process one delivery of a job.

        Args:
            job_id (str): Id of a job created by the job store
            request (GenerationRequest): The job's normalized request

        Returns:
            The job as stored after processing

        Raises:
            SongGenerationError: Re-raised after the job is marked failed
        """
        job = self.store.get(job_id)
        if job.status == SUCCEEDED:
            logger.info(f"Job {job_id} already succeeded, ignoring duplicate delivery")
            return job

        job = self.store.update(job_id, status=PROCESSING, error_message=None, attempts=job.attempts + 1)
        logger.info(f"Processing job {job_id} (attempt {job.attempts})")

        try:
            cached = self.store.find_succeeded_by_hash(job.input_hash)
            if cached is not None and str(cached.id) != str(job_id):
                return self._copy_from(job_id, cached)
            return self._generate(job_id, request)
        except Exception as e:
            message = user_message(e)
            if isinstance(e, SongGenerationError):
                logger.error(f"Job {job_id} failed: {e}")
            else:
                logger.exception(f"Job {job_id} failed with an unexpected error")
            self.store.update(job_id, status=FAILED, error_message=message)
            raise

    def _copy_from(self, job_id, cached):
        logger.info(f"Job {job_id} reuses artifacts of job {cached.id} (same input hash)")
        return self.store.update(
            job_id,
            status=SUCCEEDED,
            lyrics=cached.lyrics,
            lyrics_lrc=cached.lyrics_lrc,
            audio_key=cached.audio_key,
            preview_key=cached.preview_key,
            duration_sec=cached.duration_sec,
            provider_request_id=cached.provider_request_id,
        )

    def _generate(self, job_id, request):
        lyrics = filter_content(self.renderer(request), request.rating_mode)
        style = StyleParams.from_request(request, duration_sec=self.config.default_duration_sec)

        request_id = self.client.submit(lyrics, style)
        self.store.update(job_id, provider_request_id=request_id)
        logger.info(f"Job {job_id} submitted as provider request {request_id}")

        result = self._wait_for_audio(job_id, request_id)
        return self._finish(job_id, lyrics, result)

    def _wait_for_audio(self, job_id, request_id):
        attempts = self.config.max_poll_attempts
        for attempt in range(1, attempts + 1):
            result = self.client.poll(request_id)
            logger.debug(f"Job {job_id} poll {attempt}/{attempts}: {result.status}")

            if result.status == PROVIDER_SUCCEEDED:
                if not result.audio_bytes:
                    raise ProviderFailedError("Provider returned no audio")
                return result
            if result.status == PROVIDER_FAILED:
                message = result.error or "Song generation failed"
                if result.retryable:
                    raise ProviderError(message)
                raise ProviderFailedError(message)

            if attempt < attempts:
                self.sleep(self.config.poll_interval)

        raise GenerationTimeoutError(f"Song generation timed out after {attempts} poll attempts")

    def _finish(self, job_id, lyrics, result):
        duration = result.duration_sec or self.post_processor.get_audio_duration(result.audio_bytes)
        if not duration:
            duration = self.config.default_duration_sec

        audio_key = generate_storage_key(job_id, 'full', 'mp3')
        self.storage.put(audio_key, result.audio_bytes, AUDIO_BUCKET)

        preview = self.post_processor.make_preview(result.audio_bytes)
        preview_key = generate_storage_key(job_id, 'preview', self.config.preview_format)
        self.storage.put(preview_key, preview, PREVIEW_BUCKET)

        job = self.store.update(
            job_id,
            status=SUCCEEDED,
            lyrics=lyrics,
            lyrics_lrc=build_lrc(lyrics, duration),
            audio_key=audio_key,
            preview_key=preview_key,
            duration_sec=duration,
        )
        logger.info(f"Job {job_id} succeeded ({duration:g}s)")
        return job

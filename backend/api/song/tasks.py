"""
Celery tasks for song generation.
"""
import logging

import requests
from celery import shared_task
from django.conf import settings
from django.core.files.storage import default_storage
from kombu.exceptions import OperationalError

from .audio import AudioPostProcessor
from .exceptions import ProviderError, QueueUnavailableError, SongGenerationError
from .generation import build_generation_client
from .normalize import GenerationRequest, normalize_and_hash
from .pipeline import PipelineConfig, SongPipeline
from .states import FAILED, PROCESSING, SUCCEEDED
from .storage import ObjectStorage
from .store import DjangoJobStore, MemoryJobStore

logger = logging.getLogger(__name__)

QUEUE_NAME = 'song-generate'
MAX_ATTEMPTS = 3

_memory_store = None


def get_job_store():
    """Job store selected by the SONG_JOB_STORE setting ('django' or 'memory')."""
    global _memory_store
    if getattr(settings, 'SONG_JOB_STORE', 'django') == 'memory':
        if _memory_store is None:
            _memory_store = MemoryJobStore()
        return _memory_store
    return DjangoJobStore()


def build_pipeline(store=None, client=None, storage=None):
    """
    Build a ``SongPipeline`` from Django settings.

    Any collaborator passed in is used as is, so callers and tests can swap
    in their own store, client or storage.
    """
    if client is None:
        client = build_generation_client(
            offline=getattr(settings, 'SONG_GENERATION_OFFLINE', False),
            api_key=getattr(settings, 'SONG_PROVIDER_API_KEY', None),
            base_url=getattr(settings, 'SONG_PROVIDER_BASE_URL', 'https://api.suno.ai/v1'),
            timeout=getattr(settings, 'SONG_PROVIDER_TIMEOUT', 30),
            stub_delay=getattr(settings, 'SONG_STUB_DELAY', 1.0),
        )
    config = PipelineConfig.from_settings(settings)
    post_processor = AudioPostProcessor(
        preview_seconds=getattr(settings, 'SONG_PREVIEW_SECONDS', 15),
        fade_seconds=getattr(settings, 'SONG_PREVIEW_FADE', 0.2),
        output_format=config.preview_format,
        ffmpeg_binary=getattr(settings, 'FFMPEG_BINARY', 'ffmpeg'),
        ffprobe_binary=getattr(settings, 'FFPROBE_BINARY', 'ffprobe'),
    )
    return SongPipeline(
        store=store or get_job_store(),
        client=client,
        storage=storage or ObjectStorage(default_storage),
        post_processor=post_processor,
        config=config,
    )


@shared_task(
    bind=True,
    name='api.song.generate_song',
    queue=QUEUE_NAME,
    autoretry_for=(ProviderError, requests.RequestException),
    max_retries=MAX_ATTEMPTS - 1,
    retry_backoff=5,
    retry_backoff_max=60,
    retry_jitter=False,
    acks_late=True,
)
def generate_song(self, job_id, request, input_hash):
    """
    Generate the song for a queued job.

    Transient provider errors are retried with exponential backoff
    (5s, 10s) for three attempts in total; each retry reprocesses the
    whole job. Terminal errors fail the job on the first attempt.

    Args:
        job_id (str): Id of the queued job
        request (dict): Normalized request as produced by ``GenerationRequest.to_dict``
        input_hash (str): Content hash the job was created with
    """
    logger.info(f"Song task for job {job_id} (delivery {self.request.retries + 1}/{MAX_ATTEMPTS})")
    store = get_job_store()
    job = store.get(job_id)
    if job.input_hash != input_hash:
        logger.warning(f"Job {job_id} hash mismatch between queue message and store, using the stored hash")

    try:
        pipeline = build_pipeline(store=store)
    except SongGenerationError as e:
        logger.error(f"Could not set up song generation for job {job_id}: {e}")
        mark_job_failed(store, job_id, str(e))
        raise

    pipeline.run(job_id, GenerationRequest.from_dict(request))
    return str(job_id)


def mark_job_failed(store, job_id, message):
    """
    Fail a job that never reached the pipeline.

    Jobs only fail from processing, so a queued job is moved to processing
    first. Succeeded jobs are left alone.

    Returns:
        The job as stored afterwards
    """
    job = store.get(job_id)
    if job.status == SUCCEEDED:
        return job
    if job.status != PROCESSING:
        store.update(job_id, status=PROCESSING, error_message=None)
    return store.update(job_id, status=FAILED, error_message=message)


def enqueue_song_job(raw_request, store=None):
    """
    Create a queued job for an already validated request and send it to the worker.

    Args:
        raw_request (dict): Validated request fields, as the user entered them
        store: Job store to create the job in, defaults to the configured one

    Returns:
        The created job

    Raises:
        QueueUnavailableError: If the broker cannot be reached; the job is marked failed
    """
    store = store or get_job_store()
    request, input_hash = normalize_and_hash(raw_request)
    job = store.create(input_hash, raw_inputs=raw_request)
    try:
        generate_song.delay(str(job.id), request.to_dict(), input_hash)
    except OperationalError as e:
        logger.error(f"Could not enqueue song job {job.id}: {e}")
        message = "Song generation queue is unavailable, please try again"
        mark_job_failed(store, job.id, message)
        raise QueueUnavailableError(message) from e
    logger.info(f"Enqueued song job {job.id} (hash {input_hash[:12]})")
    return job

"""
Clients for the external music-generation provider.

``SongGenerationClient`` talks to the provider over HTTP. ``StubGenerationClient``
is the offline mode used in development; it is only ever chosen explicitly
through configuration, never as a fallback for a failing provider.
"""
import io
import math
import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Optional

import requests
from pydub import AudioSegment

from .exceptions import GenerationConfigError, ProviderError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'https://api.suno.ai/v1'
DEFAULT_DURATION_SEC = 45

QUEUED = 'queued'
PROCESSING = 'processing'
SUCCEEDED = 'succeeded'
FAILED = 'failed'

PROVIDER_STATUS_MAP = {
    'queued': QUEUED,
    'pending': QUEUED,
    'submitted': QUEUED,
    'processing': PROCESSING,
    'running': PROCESSING,
    'generating': PROCESSING,
    'in_progress': PROCESSING,
    'succeeded': SUCCEEDED,
    'success': SUCCEEDED,
    'complete': SUCCEEDED,
    'completed': SUCCEEDED,
    'failed': FAILED,
    'error': FAILED,
    'cancelled': FAILED,
    'canceled': FAILED,
}


def normalize_provider_status(raw_status):
    """Map a provider status string onto queued/processing/succeeded/failed."""
    if not raw_status:
        return QUEUED
    return PROVIDER_STATUS_MAP.get(str(raw_status).strip().lower(), PROCESSING)


def parse_duration(value, default=DEFAULT_DURATION_SEC):
    """Provider duration in seconds, or the default when missing or unusable."""
    try:
        duration = float(value)
    except (TypeError, ValueError):
        return float(default)
    if not math.isfinite(duration) or duration <= 0:
        return float(default)
    return duration


@dataclass(frozen=True)
class StyleParams:
    genre: str
    tone: str
    persona: str
    rating_mode: str
    vocal_gender: str = 'male'
    duration_sec: int = DEFAULT_DURATION_SEC

    @classmethod
    def from_request(cls, request, duration_sec=DEFAULT_DURATION_SEC):
        return cls(
            genre=request.genre,
            tone=request.tone,
            persona=request.persona,
            rating_mode=request.rating_mode,
            vocal_gender=request.vocal_gender,
            duration_sec=duration_sec,
        )

    def tokens(self):
        """Style prompt sent to the provider."""
        return f"{self.genre} {self.tone} {self.persona} {self.vocal_gender} vocals"


@dataclass
class PollResult:
    """Provider-side state of one generation request."""
    status: str
    audio_bytes: Optional[bytes] = None
    duration_sec: Optional[float] = None
    lyrics: Optional[str] = None
    error: Optional[str] = None
    # True when the failure came from talking to the provider, not from the provider itself
    retryable: bool = False


class SongGenerationClient:
    """Client for the hosted music-generation API."""

    def __init__(self, api_key, base_url=DEFAULT_BASE_URL, timeout=30, session=None):
        """
        Initialize the client.

        Args:
            api_key (str): Provider API key
            base_url (str): Provider API root
            timeout (float): Per-request timeout in seconds
            session (requests.Session, optional): Session to reuse
        """
        if not api_key:
            raise GenerationConfigError("Music generation API key is not configured")
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({'Authorization': f'Bearer {api_key}'})

    def submit(self, lyrics, style):
        """
        Submit lyrics for generation without waiting for the result.

        Args:
            lyrics (str): Filtered lyrics
            style (StyleParams): Style parameters

        Returns:
            str: Provider request id

        Raises:
            ProviderError: If the provider cannot be reached or rejects the request
        """
        payload = {
            'lyrics': lyrics,
            'style': style.tokens(),
            'duration': style.duration_sec,
            'rating': style.rating_mode,
        }
        try:
            response = self.session.post(f"{self.base_url}/generate", json=payload, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Song generation submit failed: {e}")
            raise ProviderError("Music generation service is unavailable, please try again") from e
        except ValueError as e:
            logger.error(f"Song generation submit returned invalid JSON: {e}")
            raise ProviderError("Music generation service returned an invalid response") from e

        if not isinstance(data, dict):
            logger.error(f"Song generation submit returned a non-object body: {data!r}")
            raise ProviderError("Music generation service returned an invalid response")

        request_id = data.get('id') or data.get('request_id')
        if not request_id:
            raise ProviderError("Music generation service did not return a request id")

        logger.info(f"Submitted song generation request {request_id}")
        return str(request_id)

    def poll(self, request_id):
        """
        Check the provider-side status of a request.

        Never raises: transport and provider errors come back as a ``failed``
        result with a message.

        Args:
            request_id (str): Provider request id

        Returns:
            PollResult: Current status, with the audio once succeeded
        """
        try:
            response = self.session.get(f"{self.base_url}/jobs/{request_id}", timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.warning(f"Timed out polling song request {request_id}")
            return PollResult(FAILED, error="Music generation service timed out", retryable=True)
        except requests.RequestException as e:
            logger.warning(f"Error polling song request {request_id}: {e}")
            return PollResult(FAILED, error=f"Music generation service error: {e}", retryable=True)
        except ValueError:
            return PollResult(FAILED, error="Music generation service returned an invalid response", retryable=True)

        if not isinstance(data, dict):
            logger.warning(f"Song request {request_id} poll returned a non-object body")
            return PollResult(FAILED, error="Music generation service returned an invalid response", retryable=True)

        status = normalize_provider_status(data.get('status'))
        logger.debug(f"Song request {request_id} provider status {data.get('status')!r} -> {status}")

        if status == FAILED:
            return PollResult(FAILED, error=str(data.get('error') or "Song generation failed"))

        if status != SUCCEEDED:
            return PollResult(status)

        duration = parse_duration(data.get('duration') or data.get('duration_sec'))
        audio_url = data.get('audio_url')
        if not audio_url:
            return PollResult(FAILED, error="Provider returned no audio")

        try:
            audio_response = self.session.get(audio_url, timeout=self.timeout)
            audio_response.raise_for_status()
        except requests.RequestException as e:
            logger.warning(f"Could not download audio for song request {request_id}: {e}")
            return PollResult(FAILED, error="Could not download generated audio", retryable=True)

        if not audio_response.content:
            return PollResult(FAILED, error="Provider returned no audio")

        return PollResult(
            SUCCEEDED,
            audio_bytes=audio_response.content,
            duration_sec=duration,
            lyrics=data.get('lyrics'),
        )


class StubGenerationClient:
    """Offline stand-in for the provider that always succeeds after a fixed delay."""

    def __init__(self, delay=1.0, duration_sec=DEFAULT_DURATION_SEC, clock=time.monotonic):
        self.delay = delay
        self.duration_sec = duration_sec
        self.clock = clock
        self._submitted = {}
        self._lock = threading.Lock()
        self._audio = None

    def submit(self, lyrics, style):
        request_id = f"stub_{uuid.uuid4().hex}"
        with self._lock:
            self._submitted[request_id] = (self.clock(), lyrics)
        logger.info(f"Offline mode: accepted song request {request_id}")
        return request_id

    def poll(self, request_id):
        with self._lock:
            entry = self._submitted.get(request_id)
        if entry is None:
            return PollResult(FAILED, error=f"Unknown request {request_id}")

        submitted_at, lyrics = entry
        if self.clock() - submitted_at < self.delay:
            return PollResult(PROCESSING)

        return PollResult(
            SUCCEEDED,
            audio_bytes=self.placeholder_audio(),
            duration_sec=float(self.duration_sec),
            lyrics=lyrics,
        )

    def placeholder_audio(self):
        """Silent WAV of the configured duration."""
        if self._audio is None:
            buffer = io.BytesIO()
            AudioSegment.silent(duration=int(self.duration_sec * 1000)).export(buffer, format='wav')
            self._audio = buffer.getvalue()
        return self._audio


def build_generation_client(offline=False, api_key=None, base_url=DEFAULT_BASE_URL, timeout=30, stub_delay=1.0):
    """
    Create the generation client for the configured mode.

    Args:
        offline (bool): Use the offline stub instead of the provider
        api_key (str): Provider API key, required unless offline
        base_url (str): Provider API root
        timeout (float): Per-request timeout in seconds
        stub_delay (float): Seconds before the stub reports success

    Returns:
        SongGenerationClient or StubGenerationClient

    Raises:
        GenerationConfigError: If offline mode is off and no API key is set
    """
    if offline:
        logger.warning("Song generation running in offline mode, audio will be placeholder silence")
        return StubGenerationClient(delay=stub_delay)
    return SongGenerationClient(api_key, base_url=base_url, timeout=timeout)

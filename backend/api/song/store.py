"""
Job stores.

``MemoryJobStore`` keeps jobs in process memory and is what tests and single
process setups use. ``DjangoJobStore`` persists jobs in the ``SongJob`` table
and merges partial updates under a row lock, so several workers can update
different jobs at the same time.
"""
import copy
import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone as django_timezone

from .exceptions import JobNotFoundError
from .states import QUEUED, SUCCEEDED, validate_update

logger = logging.getLogger(__name__)


@dataclass
class JobRecord:
    id: str
    input_hash: str
    status: str = QUEUED
    raw_inputs: Dict[str, Any] = field(default_factory=dict)
    provider_request_id: Optional[str] = None
    lyrics: Optional[str] = None
    lyrics_lrc: Optional[str] = None
    audio_key: Optional[str] = None
    preview_key: Optional[str] = None
    duration_sec: Optional[float] = None
    error_message: Optional[str] = None
    attempts: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MemoryJobStore:
    """In-process job store."""

    def __init__(self):
        self._jobs = {}
        self._lock = threading.Lock()

    def create(self, input_hash, raw_inputs=None):
        job = JobRecord(id=str(uuid.uuid4()), input_hash=input_hash, raw_inputs=dict(raw_inputs or {}))
        with self._lock:
            self._jobs[job.id] = job
        logger.debug(f"Created job {job.id} for hash {input_hash[:12]}")
        return copy.deepcopy(job)

    def get(self, job_id):
        with self._lock:
            job = self._jobs.get(str(job_id))
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")
            return copy.deepcopy(job)

    def update(self, job_id, **fields):
        """
        Merge the supplied fields into a job.

        Args:
            job_id (str): Job id
            **fields: Fields to change; anything not given is left as is

        Returns:
            JobRecord: The updated job

        Raises:
            JobNotFoundError: If the job does not exist
            InvalidTransitionError: If the update breaks a lifecycle rule
        """
        with self._lock:
            job = self._jobs.get(str(job_id))
            if job is None:
                raise JobNotFoundError(f"Job {job_id} not found")
            validate_update(job.status, fields)
            for name, value in fields.items():
                setattr(job, name, value)
            job.updated_at = datetime.now(timezone.utc)
            return copy.deepcopy(job)

    def find_succeeded_by_hash(self, input_hash):
        with self._lock:
            matches = [job for job in self._jobs.values()
                       if job.input_hash == input_hash and job.status == SUCCEEDED]
            if not matches:
                return None
            return copy.deepcopy(max(matches, key=lambda job: job.updated_at))


class DjangoJobStore:
    """Job store backed by the ``SongJob`` model."""

    def __init__(self, model=None):
        if model is None:
            from ..models import SongJob
            model = SongJob
        self.model = model

    def create(self, input_hash, raw_inputs=None):
        return self.model.objects.create(input_hash=input_hash, raw_inputs=dict(raw_inputs or {}))

    def get(self, job_id):
        try:
            return self.model.objects.get(id=job_id)
        except (self.model.DoesNotExist, ValueError, ValidationError) as e:
            raise JobNotFoundError(f"Job {job_id} not found") from e

    def update(self, job_id, **fields):
        with transaction.atomic():
            try:
                job = self.model.objects.select_for_update().get(id=job_id)
            except (self.model.DoesNotExist, ValueError, ValidationError) as e:
                raise JobNotFoundError(f"Job {job_id} not found") from e
            validate_update(job.status, fields)
            for name, value in fields.items():
                setattr(job, name, value)
            job.updated_at = django_timezone.now()
            job.save(update_fields=[*fields, 'updated_at'])
        return job

    def find_succeeded_by_hash(self, input_hash):
        return (self.model.objects
                .filter(input_hash=input_hash, status=SUCCEEDED)
                .order_by('-updated_at')
                .first())

import unittest
from unittest.mock import MagicMock, patch

import requests
from django.core.files.storage import InMemoryStorage
from django.test import SimpleTestCase, override_settings
from kombu.exceptions import OperationalError

from api.song import tasks
from api.song.exceptions import GenerationConfigError, ProviderError, ProviderFailedError, QueueUnavailableError
from api.song.generation import FAILED as PROVIDER_FAILED
from api.song.generation import PollResult, StubGenerationClient
from api.song.normalize import normalize_and_hash
from api.song.pipeline import SongPipeline
from api.song.states import FAILED, PROCESSING, QUEUED
from api.song.storage import ObjectStorage
from api.song.store import DjangoJobStore, MemoryJobStore

RAW_REQUEST = {
    'team_name': 'Foo',
    'opponent_team_name': 'Bar',
    'your_roster': {'QB': 'Josh Allen'},
    'opponent_roster': {},
    'genre': 'rap',
    'tone': 'medium',
    'persona': 'narrator',
    'rating_mode': 'PG',
}


class GenerateSongTaskConfigTest(SimpleTestCase):
    """Test cases for the queue retry policy."""

    def test_retry_policy(self):
        task = tasks.generate_song
        self.assertEqual(task.name, 'api.song.generate_song')
        self.assertEqual(task.queue, 'song-generate')
        self.assertEqual(task.max_retries, tasks.MAX_ATTEMPTS - 1)
        self.assertEqual(task.retry_backoff, 5)
        self.assertTrue(task.acks_late)
        self.assertIn(ProviderError, task.autoretry_for)
        self.assertIn(requests.RequestException, task.autoretry_for)

    def test_terminal_errors_are_not_retried(self):
        for retried in tasks.generate_song.autoretry_for:
            self.assertFalse(issubclass(ProviderFailedError, retried))


class EnqueueSongJobTest(SimpleTestCase):
    """Test cases for job creation and hand-off to the worker."""

    @patch('api.song.tasks.generate_song.delay')
    def test_enqueue(self, mock_delay):
        store = MemoryJobStore()

        job = tasks.enqueue_song_job(RAW_REQUEST, store=store)

        request, input_hash = normalize_and_hash(RAW_REQUEST)
        self.assertEqual(job.status, QUEUED)
        self.assertEqual(job.input_hash, input_hash)
        self.assertEqual(store.get(job.id).raw_inputs, RAW_REQUEST)
        mock_delay.assert_called_once_with(str(job.id), request.to_dict(), input_hash)

    @patch('api.song.tasks.generate_song.delay')
    def test_enqueue_with_broker_down_fails_job(self, mock_delay):
        """A job that never reaches the queue is failed, not left queued."""
        store = MemoryJobStore()
        sent = []

        def broker_down(job_id, *args):
            sent.append(job_id)
            raise OperationalError('Connection refused')

        mock_delay.side_effect = broker_down

        with self.assertRaises(QueueUnavailableError):
            tasks.enqueue_song_job(RAW_REQUEST, store=store)

        job = store.get(sent[0])
        self.assertEqual(job.status, FAILED)
        self.assertEqual(job.error_message, 'Song generation queue is unavailable, please try again')

    @override_settings(SONG_JOB_STORE='memory')
    def test_memory_store_is_shared(self):
        self.assertIsInstance(tasks.get_job_store(), MemoryJobStore)
        self.assertIs(tasks.get_job_store(), tasks.get_job_store())

    @override_settings(SONG_JOB_STORE='django')
    def test_django_store_by_default(self):
        self.assertIsInstance(tasks.get_job_store(), DjangoJobStore)


class GenerateSongTaskTest(SimpleTestCase):
    """Test cases for running the task body."""

    def setUp(self):
        self.store = MemoryJobStore()
        self.client = MagicMock()
        self.client.submit.return_value = 'req_1'
        self.post_processor = MagicMock()
        self.post_processor.make_preview.return_value = b'preview'
        self.pipeline = SongPipeline(
            store=self.store,
            client=self.client,
            storage=ObjectStorage(InMemoryStorage()),
            post_processor=self.post_processor,
            sleep=lambda seconds: None,
        )
        self.request, self.input_hash = normalize_and_hash(RAW_REQUEST)
        self.job = self.store.create(self.input_hash, raw_inputs=RAW_REQUEST)

    @patch('api.song.tasks.get_job_store')
    @patch('api.song.tasks.build_pipeline')
    def test_runs_pipeline(self, mock_build, mock_get_store):
        mock_get_store.return_value = self.store
        self.pipeline.client = StubGenerationClient(delay=0)
        mock_build.return_value = self.pipeline

        result = tasks.generate_song(str(self.job.id), self.request.to_dict(), self.input_hash)

        self.assertEqual(result, str(self.job.id))
        job = self.store.get(self.job.id)
        self.assertEqual(job.status, 'succeeded')
        self.assertTrue(job.provider_request_id.startswith('stub_'))

    @patch('api.song.tasks.get_job_store')
    @patch('api.song.tasks.build_pipeline')
    def test_terminal_failure_propagates(self, mock_build, mock_get_store):
        mock_get_store.return_value = self.store
        self.client.poll.return_value = PollResult(PROVIDER_FAILED, error='X')
        mock_build.return_value = self.pipeline

        with self.assertRaises(ProviderFailedError):
            tasks.generate_song(str(self.job.id), self.request.to_dict(), self.input_hash)

        self.client.submit.assert_called_once()
        job = self.store.get(self.job.id)
        self.assertEqual(job.status, FAILED)
        self.assertEqual(job.error_message, 'X')

    @override_settings(SONG_GENERATION_OFFLINE=False, SONG_PROVIDER_API_KEY='')
    @patch('api.song.tasks.get_job_store')
    def test_missing_api_key_fails_job(self, mock_get_store):
        """Setup errors before the pipeline runs still leave one error message on the job."""
        mock_get_store.return_value = self.store

        with self.assertRaises(GenerationConfigError):
            tasks.generate_song(str(self.job.id), self.request.to_dict(), self.input_hash)

        job = self.store.get(self.job.id)
        self.assertEqual(job.status, FAILED)
        self.assertEqual(job.error_message, 'Music generation API key is not configured')

    def test_mark_job_failed(self):
        self.store.update(self.job.id, status=PROCESSING)
        self.store.update(self.job.id, status=FAILED, error_message='first')

        job = tasks.mark_job_failed(self.store, self.job.id, 'second')

        self.assertEqual(job.status, FAILED)
        self.assertEqual(job.error_message, 'second')


if __name__ == '__main__':
    unittest.main()

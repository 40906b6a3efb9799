import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import status, viewsets
from rest_framework.decorators import action, api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from .entitlements import is_job_unlocked
from .serializers import JobStatusSerializer, SongRequestSerializer
from .song.exceptions import JobNotFoundError, QueueUnavailableError
from .song.states import SUCCEEDED
from .song.storage import AUDIO_BUCKET, PREVIEW_BUCKET, ObjectStorage
from .song.tasks import enqueue_song_job, get_job_store

logger = logging.getLogger(__name__)


class SongJobViewSet(viewsets.ViewSet):
    """ViewSet for creating song jobs and following their progress"""
    permission_classes = [AllowAny]

    def get_store(self):
        return get_job_store()

    def get_storage(self):
        return ObjectStorage()

    def get_job(self, pk):
        try:
            return self.get_store().get(pk)
        except JobNotFoundError:
            return None

    def create(self, request):
        serializer = SongRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        store = self.get_store()
        try:
            job = enqueue_song_job(serializer.validated_data, store=store)
        except QueueUnavailableError as e:
            return Response({'error': str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        # Re-read, the worker may already have picked the job up
        job = store.get(job.id)
        return Response(JobStatusSerializer(job).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def status(self, request, pk=None):
        """Get the status of a song generation job"""
        job = self.get_job(pk)
        if job is None:
            return Response({'error': 'Job not found'}, status=status.HTTP_404_NOT_FOUND)
        return Response(JobStatusSerializer(job).data)

    @action(detail=True, methods=['get'])
    def preview(self, request, pk=None):
        """Signed URL of the preview clip"""
        job = self.get_job(pk)
        if job is None:
            return Response({'error': 'Job not found'}, status=status.HTTP_404_NOT_FOUND)
        if job.status != SUCCEEDED:
            return Response({'error': 'Song is not ready yet'}, status=status.HTTP_409_CONFLICT)

        url = self.get_storage().signed_url(job.preview_key, PREVIEW_BUCKET, settings.SONG_SIGNED_URL_TTL)
        return Response({'url': url})

    @action(detail=True, methods=['get'])
    def download(self, request, pk=None):
        """Signed URL of the full track and the LRC, once the song is unlocked"""
        job = self.get_job(pk)
        if job is None:
            return Response({'error': 'Job not found'}, status=status.HTTP_404_NOT_FOUND)
        if job.status != SUCCEEDED:
            return Response({'error': 'Song is not ready yet'}, status=status.HTTP_409_CONFLICT)
        if not is_job_unlocked(job, request):
            return Response({'error': 'Purchase required to download the full song'},
                            status=status.HTTP_402_PAYMENT_REQUIRED)

        url = self.get_storage().signed_url(job.audio_key, AUDIO_BUCKET, settings.SONG_SIGNED_URL_TTL)
        return Response({'url': url, 'lyrics_lrc': job.lyrics_lrc})


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    from trash_talk_project.celery import check_queue_health

    return Response({
        'status': 'healthy',
        'timestamp': timezone.now().isoformat(),
        'queue': check_queue_health(),
    })

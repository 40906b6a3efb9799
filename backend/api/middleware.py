import logging
import os

from django.conf import settings
from django.http import HttpResponseForbidden

from .song.storage import BUCKETS, ObjectStorage

logger = logging.getLogger(__name__)

AUDIO_CONTENT_TYPES = {
    '.mp3': 'audio/mpeg',
    '.wav': 'audio/wav',
    '.ogg': 'audio/ogg',
    '.m4a': 'audio/mp4',
}


class ContentTypeMiddleware:
    """
    Middleware for media audio files: only signed URLs are served, and
    responses get the right Content-Type and no-cache headers.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        media_url = settings.MEDIA_URL
        if not request.path.startswith(media_url):
            return self.get_response(request)

        relative = request.path[len(media_url):].lstrip('/')
        bucket, _, key = relative.partition('/')
        if bucket not in BUCKETS:
            return self.get_response(request)

        token = request.GET.get('token', '')
        try:
            ttl = int(request.GET.get('ttl', settings.SONG_SIGNED_URL_TTL))
        except ValueError:
            ttl = settings.SONG_SIGNED_URL_TTL
        ttl = min(ttl, settings.SONG_SIGNED_URL_TTL)
        if not ObjectStorage().verify_signature(key, bucket, token, ttl):
            logger.warning(f"Rejected unsigned or expired media request: {request.path}")
            return HttpResponseForbidden('Invalid or expired link')

        response = self.get_response(request)

        file_ext = os.path.splitext(request.path)[1].lower()
        if file_ext in AUDIO_CONTENT_TYPES:
            response['Content-Type'] = AUDIO_CONTENT_TYPES[file_ext]

        # Add Cache-Control header to prevent caching issues
        response['Cache-Control'] = 'no-cache, no-store, must-revalidate'
        response['Pragma'] = 'no-cache'
        response['Expires'] = '0'

        # Add CORS headers for all media files
        response['Access-Control-Allow-Origin'] = '*'
        response['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
        response['Access-Control-Allow-Headers'] = 'Content-Type, Accept, X-Requested-With, Range'

        return response

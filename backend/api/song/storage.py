"""
Object storage for generated audio.

Buckets map to top-level directories of a Django storage backend. Signed URLs
carry a ``TimestampSigner`` token over the bucket and key, checked by
``verify_signature``.
"""
import logging
from urllib.parse import urlencode

from django.core import signing
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

logger = logging.getLogger(__name__)

AUDIO_BUCKET = 'audio'
PREVIEW_BUCKET = 'previews'
BUCKETS = (AUDIO_BUCKET, PREVIEW_BUCKET)

SIGNING_SALT = 'api.song.storage'


class ObjectStorage:
    """Key/value blob store over a Django storage backend."""

    def __init__(self, backend=None, signer=None):
        self.backend = backend or default_storage
        self.signer = signer or signing.TimestampSigner(salt=SIGNING_SALT)

    @staticmethod
    def _path(key, bucket):
        if bucket not in BUCKETS:
            raise ValueError(f"Unknown bucket: {bucket}")
        return f"{bucket}/{key}"

    def put(self, key, data, bucket):
        """
        Store bytes under a key, replacing anything already there.

        Args:
            key (str): Object key
            data (bytes): Content
            bucket (str): 'audio' or 'previews'

        Returns:
            str: The key
        """
        path = self._path(key, bucket)
        if self.backend.exists(path):
            self.backend.delete(path)
        saved = self.backend.save(path, ContentFile(data))
        if saved != path:
            logger.warning(f"Storage saved {path} as {saved}")
        logger.info(f"Stored {len(data)} bytes at {path}")
        return key

    def get(self, key, bucket):
        path = self._path(key, bucket)
        with self.backend.open(path, 'rb') as f:
            return f.read()

    def signed_url(self, key, bucket, ttl_sec=600):
        """
        Build a time-limited URL for an object.

        Args:
            key (str): Object key
            bucket (str): 'audio' or 'previews'
            ttl_sec (int): Seconds the signature stays valid

        Returns:
            str: URL with ``token`` and ``ttl`` query parameters
        """
        path = self._path(key, bucket)
        token = self.signer.sign(path)
        return f"{self.backend.url(path)}?{urlencode({'token': token, 'ttl': ttl_sec})}"

    def verify_signature(self, key, bucket, token, ttl_sec=600):
        """Return True if ``token`` was issued for this object and has not expired."""
        try:
            value = self.signer.unsign(token, max_age=ttl_sec)
        except signing.BadSignature:
            return False
        return value == self._path(key, bucket)

"""
Utility functions for the song generation pipeline.
"""
import time
import uuid


def generate_storage_key(job_id, kind, extension='mp3'):
    """
    Build a unique object storage key for a job artifact.

    Args:
        job_id (str): Job identifier
        kind (str): Artifact kind, e.g. 'full' or 'preview'
        extension (str): File extension without the dot

    Returns:
        str: Key of the form ``<kind>/<job_id>_<epoch_ms>_<uuid>.<extension>``
    """
    timestamp = int(time.time() * 1000)
    return f"{kind}/{job_id}_{timestamp}_{uuid.uuid4().hex}.{extension}"


"""
Entitlement checks for full-song downloads.

Purchases are handled outside this service; the download endpoint only asks
the callable named by ``SONG_ENTITLEMENT_CHECKER`` whether a job is unlocked.
"""
from django.conf import settings
from django.utils.module_loading import import_string


def deny_all(job, request=None):
    """Default checker: nothing is unlocked until a real checker is configured."""
    return False


def is_job_unlocked(job, request=None):
    checker = import_string(getattr(settings, 'SONG_ENTITLEMENT_CHECKER', 'api.entitlements.deny_all'))
    return bool(checker(job, request))

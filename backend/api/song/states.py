"""
Job lifecycle rules shared by every job store.
"""
from .exceptions import InvalidTransitionError

QUEUED = 'queued'
PROCESSING = 'processing'
SUCCEEDED = 'succeeded'
FAILED = 'failed'

STATUS_CHOICES = (
    (QUEUED, 'Queued'),
    (PROCESSING, 'Processing'),
    (SUCCEEDED, 'Succeeded'),
    (FAILED, 'Failed'),
)

# failed -> processing is the explicit retry path
ALLOWED_TRANSITIONS = {
    QUEUED: {PROCESSING},
    PROCESSING: {SUCCEEDED, FAILED},
    FAILED: {PROCESSING},
    SUCCEEDED: set(),
}

RESULT_FIELDS = frozenset({'lyrics', 'lyrics_lrc', 'audio_key', 'preview_key', 'duration_sec'})

JOB_FIELDS = frozenset({
    'status', 'input_hash', 'raw_inputs', 'provider_request_id', 'lyrics', 'lyrics_lrc',
    'audio_key', 'preview_key', 'duration_sec', 'error_message', 'attempts',
})


def validate_update(current_status, fields):
    """
    Check a partial update against the job lifecycle.

    Args:
        current_status (str): Status the job has now
        fields (dict): Fields about to be written

    Raises:
        ValueError: If a field name is unknown
        InvalidTransitionError: If the update breaks a lifecycle rule
    """
    unknown = set(fields) - JOB_FIELDS
    if unknown:
        raise ValueError(f"Unknown job fields: {', '.join(sorted(unknown))}")

    if 'input_hash' in fields:
        raise InvalidTransitionError("input_hash cannot change after creation")

    new_status = fields.get('status', current_status)
    if new_status != current_status and new_status not in ALLOWED_TRANSITIONS.get(current_status, set()):
        raise InvalidTransitionError(f"Cannot move job from {current_status} to {new_status}")

    changing_status = new_status != current_status
    if RESULT_FIELDS.intersection(fields) and not (changing_status and new_status == SUCCEEDED):
        raise InvalidTransitionError("Result fields can only be written when the job succeeds")

    if fields.get('error_message') and not (changing_status and new_status == FAILED):
        raise InvalidTransitionError("error_message can only be written when the job fails")


def is_terminal(status):
    return status in (SUCCEEDED, FAILED)

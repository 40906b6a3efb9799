from django.db import models
import uuid

from .song.states import QUEUED, STATUS_CHOICES


class SongJob(models.Model):
    """Model for storing song generation job information"""
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=QUEUED)
    input_hash = models.CharField(max_length=64, db_index=True, editable=False)
    raw_inputs = models.JSONField(default=dict, blank=True)
    provider_request_id = models.CharField(max_length=255, blank=True, null=True)
    lyrics = models.TextField(blank=True, null=True)
    lyrics_lrc = models.TextField(blank=True, null=True)
    audio_key = models.CharField(max_length=255, blank=True, null=True)
    preview_key = models.CharField(max_length=255, blank=True, null=True)
    duration_sec = models.FloatField(blank=True, null=True)
    error_message = models.TextField(blank=True, null=True)
    attempts = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['input_hash', 'status'], name='api_songjob_hash_status_idx'),
        ]

    def __str__(self):
        team = self.raw_inputs.get('team_name', '?') if self.raw_inputs else '?'
        opponent = self.raw_inputs.get('opponent_team_name', '?') if self.raw_inputs else '?'
        return f"{team} vs {opponent} ({self.status})"

from rest_framework import serializers

from .song.states import SUCCEEDED

GENRE_CHOICES = ['country', 'rap', 'electronic', 'pop', 'blues', 'funk', 'rnb', 'gospel', 'rock', 'reggae']
TONE_CHOICES = ['mild', 'medium', 'savage']
PERSONA_CHOICES = ['first_person', 'narrator']
RATING_CHOICES = ['PG', 'NSFW']
VOCAL_GENDER_CHOICES = ['male', 'female']

MAX_ROSTER_SIZE = 20


class CaseInsensitiveChoiceField(serializers.ChoiceField):
    """Choice field that accepts any letter case and surrounding whitespace."""

    def to_internal_value(self, data):
        if isinstance(data, str):
            stripped = data.strip()
            for choice in self.choices:
                if choice.lower() == stripped.lower():
                    return choice
        return super().to_internal_value(data)


class SongRequestSerializer(serializers.Serializer):
    """Serializer for validating a song generation request"""
    team_name = serializers.CharField(max_length=100)
    opponent_team_name = serializers.CharField(max_length=100)
    your_roster = serializers.DictField(child=serializers.CharField(max_length=100, allow_blank=True), required=False, default=dict)
    opponent_roster = serializers.DictField(child=serializers.CharField(max_length=100, allow_blank=True), required=False, default=dict)
    genre = CaseInsensitiveChoiceField(choices=GENRE_CHOICES)
    tone = CaseInsensitiveChoiceField(choices=TONE_CHOICES)
    persona = CaseInsensitiveChoiceField(choices=PERSONA_CHOICES, default='narrator')
    rating_mode = CaseInsensitiveChoiceField(choices=RATING_CHOICES, default='PG')
    vocal_gender = CaseInsensitiveChoiceField(choices=VOCAL_GENDER_CHOICES, default='male')

    def validate_your_roster(self, value):
        return self._validate_roster(value)

    def validate_opponent_roster(self, value):
        return self._validate_roster(value)

    def _validate_roster(self, value):
        if len(value) > MAX_ROSTER_SIZE:
            raise serializers.ValidationError(f"A roster can have at most {MAX_ROSTER_SIZE} positions.")
        for position in value:
            if not str(position).strip():
                raise serializers.ValidationError("Position labels cannot be blank.")
        return value


class JobStatusSerializer(serializers.Serializer):
    """Read-only view of a job as exposed to the UI"""
    id = serializers.CharField()
    status = serializers.CharField()
    lyrics = serializers.SerializerMethodField()
    preview_key = serializers.SerializerMethodField()
    error_message = serializers.CharField(allow_null=True)

    def get_lyrics(self, obj):
        return obj.lyrics if obj.status == SUCCEEDED else None

    def get_preview_key(self, obj):
        return obj.preview_key if obj.status == SUCCEEDED else None

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='SongJob',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('queued', 'Queued'), ('processing', 'Processing'), ('succeeded', 'Succeeded'), ('failed', 'Failed')], default='queued', max_length=20)),
                ('input_hash', models.CharField(db_index=True, editable=False, max_length=64)),
                ('raw_inputs', models.JSONField(blank=True, default=dict)),
                ('provider_request_id', models.CharField(blank=True, max_length=255, null=True)),
                ('lyrics', models.TextField(blank=True, null=True)),
                ('lyrics_lrc', models.TextField(blank=True, null=True)),
                ('audio_key', models.CharField(blank=True, max_length=255, null=True)),
                ('preview_key', models.CharField(blank=True, max_length=255, null=True)),
                ('duration_sec', models.FloatField(blank=True, null=True)),
                ('error_message', models.TextField(blank=True, null=True)),
                ('attempts', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['input_hash', 'status'], name='api_songjob_hash_status_idx')],
            },
        ),
    ]

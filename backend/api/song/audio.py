"""
Functions for post-processing generated audio.
"""
import logging
import os
import subprocess
import tempfile

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from .exceptions import AudioProcessingError

logger = logging.getLogger(__name__)

PREVIEW_SECONDS = 15
FADE_SECONDS = 0.2


class AudioPostProcessor:
    """Class for deriving preview clips from full-length tracks."""

    def __init__(self, preview_seconds=PREVIEW_SECONDS, fade_seconds=FADE_SECONDS,
                 output_format='mp3', ffmpeg_binary='ffmpeg', ffprobe_binary='ffprobe'):
        """
        Initialize the post-processor.

        Args:
            preview_seconds (float): Length of the preview clip
            fade_seconds (float): Length of the fade-in and of the fade-out
            output_format (str): Container/codec extension for the preview
            ffmpeg_binary (str): ffmpeg executable
            ffprobe_binary (str): ffprobe executable
        """
        self.preview_seconds = preview_seconds
        self.fade_seconds = fade_seconds
        self.output_format = output_format
        self.ffmpeg_binary = ffmpeg_binary
        self.ffprobe_binary = ffprobe_binary

    def make_preview(self, full_audio):
        """
        Cut a faded preview clip from the start of a full track.

        All intermediate files live in a temporary directory that is removed
        whether or not ffmpeg succeeds.

        Args:
            full_audio (bytes): Encoded full-length audio

        Returns:
            bytes: Encoded preview audio

        Raises:
            AudioProcessingError: If the input is empty or cannot be processed
        """
        if not full_audio:
            raise AudioProcessingError("Cannot create a preview from empty audio")

        with tempfile.TemporaryDirectory(prefix='song_preview_') as temp_dir:
            input_path = os.path.join(temp_dir, 'input_audio')
            output_path = os.path.join(temp_dir, f'preview.{self.output_format}')
            with open(input_path, 'wb') as f:
                f.write(full_audio)

            clip_length = self.preview_seconds
            duration = self._probe_duration(input_path)
            if duration and duration < clip_length:
                clip_length = duration

            cmd = [
                self.ffmpeg_binary,
                '-v', 'error',
                '-i', input_path,
                '-t', f'{clip_length:g}',
                '-af', self._fade_filter(clip_length),
                '-y',
                output_path,
            ]
            try:
                result = subprocess.run(cmd, capture_output=True, text=True)
            except OSError as e:
                logger.error(f"Could not run ffmpeg: {e}")
                raise AudioProcessingError("Audio tools are unavailable, could not create preview") from e

            if result.returncode != 0:
                logger.error(f"ffmpeg failed with code {result.returncode}: {(result.stderr or '').strip()[-500:]}")
                raise AudioProcessingError("Could not create preview clip from the generated audio")

            if not os.path.exists(output_path) or os.path.getsize(output_path) == 0:
                raise AudioProcessingError("Preview clip came out empty")

            with open(output_path, 'rb') as f:
                preview = f.read()

        logger.info(f"Created {clip_length:g}s preview ({len(preview)} bytes)")
        return preview

    def _fade_filter(self, clip_length):
        """Fade in at the start and fade out ending exactly at the clip boundary."""
        fade = min(self.fade_seconds, clip_length / 2)
        fade_out_start = max(0.0, clip_length - fade)
        return f'afade=t=in:st=0:d={fade:g},afade=t=out:st={fade_out_start:.3f}:d={fade:g}'

    def get_audio_duration(self, audio_bytes):
        """
        Get the duration of encoded audio.

        Args:
            audio_bytes (bytes): Encoded audio

        Returns:
            float: Duration in seconds, or None if it cannot be determined
        """
        if not audio_bytes:
            return None
        with tempfile.TemporaryDirectory(prefix='song_probe_') as temp_dir:
            path = os.path.join(temp_dir, 'probe_audio')
            with open(path, 'wb') as f:
                f.write(audio_bytes)
            return self._probe_duration(path)

    def _probe_duration(self, audio_path):
        try:
            result = subprocess.run([
                self.ffprobe_binary, '-v', 'error', '-show_entries', 'format=duration',
                '-of', 'default=noprint_wrappers=1:nokey=1', audio_path
            ], capture_output=True, text=True)
            if result.returncode == 0 and result.stdout.strip():
                return float(result.stdout.strip())
        except (OSError, ValueError) as e:
            logger.warning(f"ffprobe could not read duration: {e}")

        # Fall back to pydub if ffprobe fails
        try:
            audio = AudioSegment.from_file(audio_path)
            return len(audio) / 1000.0
        except (CouldntDecodeError, OSError, IndexError) as e:
            logger.warning(f"pydub could not read duration: {e}")
            return None

import io
import shutil
import subprocess
import unittest
from unittest.mock import MagicMock, patch

from django.test import SimpleTestCase, tag
from pydub import AudioSegment

from api.song.audio import AudioPostProcessor
from api.song.exceptions import AudioProcessingError


def fake_run(duration='30.0', returncode=0, output=b'preview-bytes'):
    """Build a subprocess.run replacement for ffprobe and ffmpeg calls."""
    calls = []

    def run(cmd, **kwargs):
        calls.append(cmd)
        if cmd[0] == 'ffprobe':
            return subprocess.CompletedProcess(cmd, 0, stdout=f'{duration}\n', stderr='')
        if returncode == 0 and output:
            with open(cmd[-1], 'wb') as f:
                f.write(output)
        return subprocess.CompletedProcess(cmd, returncode, stdout='', stderr='boom')

    return run, calls


class AudioPostProcessorTest(SimpleTestCase):
    """Test cases for the AudioPostProcessor class."""

    def setUp(self):
        self.processor = AudioPostProcessor(preview_seconds=15, fade_seconds=0.2)

    def test_empty_input(self):
        with self.assertRaises(AudioProcessingError):
            self.processor.make_preview(b'')

    @patch('api.song.audio.subprocess.run')
    def test_make_preview(self, mock_run):
        """The preview is cut to 15s with a fade in and a fade out ending at 15s."""
        mock_run.side_effect, calls = fake_run(duration='45.0')

        preview = self.processor.make_preview(b'full-track')

        self.assertEqual(preview, b'preview-bytes')
        ffmpeg_cmd = calls[-1]
        self.assertEqual(ffmpeg_cmd[0], 'ffmpeg')
        self.assertEqual(ffmpeg_cmd[ffmpeg_cmd.index('-t') + 1], '15')
        self.assertEqual(
            ffmpeg_cmd[ffmpeg_cmd.index('-af') + 1],
            'afade=t=in:st=0:d=0.2,afade=t=out:st=14.800:d=0.2',
        )
        self.assertTrue(ffmpeg_cmd[-1].endswith('preview.mp3'))

    @patch('api.song.audio.subprocess.run')
    def test_short_track_is_not_padded(self, mock_run):
        mock_run.side_effect, calls = fake_run(duration='8')

        self.processor.make_preview(b'short-track')

        ffmpeg_cmd = calls[-1]
        self.assertEqual(ffmpeg_cmd[ffmpeg_cmd.index('-t') + 1], '8')
        self.assertIn('afade=t=out:st=7.800:d=0.2', ffmpeg_cmd[ffmpeg_cmd.index('-af') + 1])

    @patch('api.song.audio.subprocess.run')
    def test_ffmpeg_failure(self, mock_run):
        mock_run.side_effect, _ = fake_run(returncode=1)
        with self.assertRaises(AudioProcessingError):
            self.processor.make_preview(b'full-track')

    @patch('api.song.audio.subprocess.run')
    def test_empty_output(self, mock_run):
        mock_run.side_effect, _ = fake_run(output=b'')
        with self.assertRaises(AudioProcessingError):
            self.processor.make_preview(b'full-track')

    @patch('api.song.audio.AudioSegment')
    @patch('api.song.audio.subprocess.run')
    def test_ffmpeg_missing(self, mock_run, mock_segment):
        mock_run.side_effect = FileNotFoundError('ffmpeg')
        mock_segment.from_file.side_effect = FileNotFoundError('ffprobe')

        with self.assertRaises(AudioProcessingError):
            self.processor.make_preview(b'full-track')

    @patch('api.song.audio.subprocess.run')
    def test_get_audio_duration(self, mock_run):
        mock_run.side_effect, _ = fake_run(duration='42.5')
        self.assertEqual(self.processor.get_audio_duration(b'audio'), 42.5)

    @patch('api.song.audio.AudioSegment')
    @patch('api.song.audio.subprocess.run')
    def test_get_audio_duration_falls_back_to_pydub(self, mock_run, mock_segment):
        mock_run.return_value = subprocess.CompletedProcess([], 1, stdout='', stderr='bad')
        mock_segment.from_file.return_value = MagicMock(__len__=lambda self: 3000)

        self.assertEqual(self.processor.get_audio_duration(b'audio'), 3.0)

    def test_get_audio_duration_empty(self):
        self.assertIsNone(self.processor.get_audio_duration(b''))


@tag('ffmpeg')
@unittest.skipUnless(shutil.which('ffmpeg') and shutil.which('ffprobe'), 'ffmpeg and ffprobe are not installed')
class AudioPostProcessorFfmpegTest(SimpleTestCase):
    """Test cases that run the real ffmpeg binaries on generated audio."""

    def setUp(self):
        self.processor = AudioPostProcessor(preview_seconds=15, fade_seconds=0.2, output_format='wav')
        buffer = io.BytesIO()
        AudioSegment.silent(duration=20000).export(buffer, format='wav')
        self.full_track = buffer.getvalue()

    def test_preview_is_at_most_fifteen_seconds(self):
        preview = self.processor.make_preview(self.full_track)

        clip = AudioSegment.from_wav(io.BytesIO(preview))
        self.assertLessEqual(len(clip), 15050)
        self.assertGreater(len(clip), 14000)

    def test_probe_reads_real_duration(self):
        self.assertAlmostEqual(self.processor.get_audio_duration(self.full_track), 20.0, places=1)

    def test_invalid_audio_raises(self):
        with self.assertRaises(AudioProcessingError):
            self.processor.make_preview(b'this is not audio' * 64)


if __name__ == '__main__':
    unittest.main()

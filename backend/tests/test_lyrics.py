import random
import unittest

from django.test import SimpleTestCase

from api.song.config.templates import resolve_position
from api.song.lyrics import filter_content, render_lyrics, render_opponent_line, render_position_line
from api.song.normalize import normalize_request


def make_request(**overrides):
    raw = {
        'team_name': 'Foo',
        'opponent_team_name': 'Bar',
        'your_roster': {'QB': 'Josh Allen', 'WR_2': 'Puka Nacua', 'Bench Slot': 'Someone'},
        'opponent_roster': {'QB': 'Joe Flacco', 'RB': 'Tony Pollard'},
        'genre': 'rap',
        'tone': 'medium',
        'persona': 'narrator',
        'rating_mode': 'PG',
    }
    raw.update(overrides)
    return normalize_request(raw)


class ResolvePositionTest(SimpleTestCase):
    """Test cases for mapping free-form position labels."""

    def test_numbered_and_suffixed_labels(self):
        self.assertEqual(resolve_position('WR1'), 'WR')
        self.assertEqual(resolve_position('WR_2'), 'WR')
        self.assertEqual(resolve_position('rb'), 'RB')

    def test_aliases(self):
        self.assertEqual(resolve_position('WRT_3'), 'FLEX')
        self.assertEqual(resolve_position('DST'), 'DEF')

    def test_unknown_label(self):
        self.assertIsNone(resolve_position('Bench Slot'))


class RenderLyricsTest(SimpleTestCase):
    """Test cases for lyric rendering."""

    def test_structure(self):
        lyrics = render_lyrics(make_request(), rng=random.Random(0))
        lines = lyrics.split('\n')
        self.assertEqual(lines[0], '[Intro]')
        for header in ('[Verse 1 - Our Champions]', '[Hook]', '[Verse 2 - Their Struggle]', '[Bridge]', '[Outro]'):
            self.assertIn(header, lines)
        self.assertIn('Yo, Foo in the house, bout to bring the heat', lines)
        self.assertEqual(lines[-1], 'Foo victory, loud and clear!')

    def test_roster_lines(self):
        lyrics = render_lyrics(make_request(), rng=random.Random(0))
        self.assertIn('Josh Allen commands the field', lyrics)
        self.assertIn('Puka Nacua burns the secondary', lyrics)
        self.assertIn('Someone makes the big plays', lyrics)
        # Opponent boasts get turned around
        self.assertIn('Joe Flacco struggles to command the field', lyrics)
        self.assertIn('Tony Pollard gets stopped at the line', lyrics)

    def test_empty_rosters(self):
        """Empty rosters render empty verses instead of failing."""
        lyrics = render_lyrics(make_request(your_roster={}, opponent_roster={}), rng=random.Random(0))
        lines = lyrics.split('\n')
        verse_index = lines.index('[Verse 1 - Our Champions]')
        self.assertEqual(lines[verse_index + 1], '')

    def test_verse_capped_at_four_lines(self):
        roster = {f'WR{i}': f'Player {i}' for i in range(1, 8)}
        lyrics = render_lyrics(make_request(your_roster=roster), rng=random.Random(0))
        self.assertIn('Player 4', lyrics)
        self.assertNotIn('Player 5', lyrics)

    def test_unknown_genre_falls_back_to_rap(self):
        lyrics = render_lyrics(make_request(genre='polka'), rng=random.Random(0))
        self.assertIn('Yo, Foo in the house', lyrics)

    def test_mild_opponent_lines_unchanged(self):
        self.assertEqual(
            render_opponent_line('QB', 'Joe Flacco', 'mild'),
            render_position_line('QB', 'Joe Flacco', 'mild'),
        )


class FilterContentTest(SimpleTestCase):
    """Test cases for the content filter."""

    def test_banned_words_always_masked(self):
        self.assertEqual(filter_content('No injury today', 'NSFW'), 'No [FILTERED] today')
        self.assertEqual(filter_content('HURT feelings', 'PG'), '[FILTERED] feelings')

    def test_pg_softens_profanity(self):
        self.assertEqual(filter_content('damn, what the hell', 'PG'), 'darn, what the heck')

    def test_nsfw_keeps_profanity(self):
        self.assertEqual(filter_content('damn, what the hell', 'NSFW'), 'damn, what the hell')

    def test_whole_words_only(self):
        self.assertEqual(filter_content('hello harmony', 'PG'), 'hello harmony')


if __name__ == '__main__':
    unittest.main()

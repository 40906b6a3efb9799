import unittest

from django.test import SimpleTestCase

from api.song.normalize import (
    GenerationRequest,
    compute_input_hash,
    normalize_and_hash,
    normalize_player_name,
    normalize_request,
    normalize_string,
)


def raw_request(**overrides):
    data = {
        'team_name': 'Foo',
        'opponent_team_name': 'Bar',
        'your_roster': {'QB': 'Josh Allen'},
        'opponent_roster': {'QB': 'Joe Flacco'},
        'genre': 'rap',
        'tone': 'mild',
        'persona': 'narrator',
        'rating_mode': 'PG',
    }
    data.update(overrides)
    return data


class NormalizeTest(SimpleTestCase):
    """Test cases for request normalization."""

    def test_normalize_string(self):
        """Team names are trimmed, lower-cased and whitespace collapsed."""
        self.assertEqual(normalize_string("  The   Mighty\tDucks "), "the mighty ducks")
        self.assertEqual(normalize_string(""), "")
        self.assertEqual(normalize_string(None), "")

    def test_normalize_player_name(self):
        """Punctuation is stripped from player names but case is kept."""
        self.assertEqual(normalize_player_name("  Amon-Ra  St. Brown "), "AmonRa St Brown")
        self.assertEqual(normalize_player_name("Michael Pittman Jr."), "Michael Pittman Jr")
        self.assertEqual(normalize_player_name(None), "")

    def test_roster_labels_kept_verbatim_and_in_order(self):
        """Free-form position labels survive normalization untouched."""
        request = normalize_request(raw_request(your_roster={'WRT_2': 'A', 'qb': 'B', 'Super Flex': 'C'}))
        self.assertEqual(list(request.your_roster), ['WRT_2', 'qb', 'Super Flex'])

    def test_rating_mode_upper_cased(self):
        request = normalize_request(raw_request(rating_mode=' nsfw '))
        self.assertEqual(request.rating_mode, 'NSFW')

    def test_round_trip_through_queue_payload(self):
        """to_dict/from_dict rebuild an equal request."""
        request = normalize_request(raw_request())
        self.assertEqual(GenerationRequest.from_dict(request.to_dict()), request)


class InputHashTest(SimpleTestCase):
    """Test cases for the content hash."""

    def test_hash_is_sha256_hex(self):
        _, digest = normalize_and_hash(raw_request())
        self.assertEqual(len(digest), 64)
        int(digest, 16)

    def test_identical_requests_collide(self):
        """Byte-identical requests produce the same digest."""
        self.assertEqual(normalize_and_hash(raw_request())[1], normalize_and_hash(raw_request())[1])

    def test_construction_order_does_not_matter(self):
        """Field and roster key order never changes the digest."""
        first = raw_request(your_roster={'QB': 'Josh Allen', 'RB': 'Bijan Robinson'})
        second = dict(reversed(list(raw_request(your_roster={'RB': 'Bijan Robinson', 'QB': 'Josh Allen'}).items())))
        self.assertEqual(normalize_and_hash(first)[1], normalize_and_hash(second)[1])

    def test_normalization_boundary(self):
        """Whitespace, case and punctuation variants collide; real changes do not."""
        base = normalize_and_hash(raw_request())[1]
        variant = raw_request(team_name='  FOO ', opponent_team_name='bar', your_roster={'QB': ' Josh  Allen!'})
        self.assertEqual(normalize_and_hash(variant)[1], base)

        self.assertNotEqual(normalize_and_hash(raw_request(tone='savage'))[1], base)
        self.assertNotEqual(normalize_and_hash(raw_request(your_roster={'QB1': 'Josh Allen'}))[1], base)
        # Player-name case is not folded
        self.assertNotEqual(normalize_and_hash(raw_request(your_roster={'QB': 'josh allen'}))[1], base)

    def test_hash_matches_for_equal_dataclasses(self):
        a = GenerationRequest('foo', 'bar', {'QB': 'X', 'RB': 'Y'}, {}, 'rap', 'mild', 'narrator', 'PG')
        b = GenerationRequest('foo', 'bar', {'RB': 'Y', 'QB': 'X'}, {}, 'rap', 'mild', 'narrator', 'PG')
        self.assertEqual(a, b)
        self.assertEqual(compute_input_hash(a), compute_input_hash(b))


if __name__ == '__main__':
    unittest.main()

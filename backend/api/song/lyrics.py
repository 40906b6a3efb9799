"""
Functions for rendering and filtering trash talk lyrics.
"""
import logging
import random
import re

from .config.templates import (
    BANNED_WORDS,
    GENERIC_LINES,
    GENRE_STYLES,
    OPPONENT_REWRITES,
    PG_REPLACEMENTS,
    POSITION_LINES,
    TONE_ENDINGS,
    resolve_position,
)

logger = logging.getLogger(__name__)

MAX_VERSE_LINES = 4
FILTERED_TOKEN = '[FILTERED]'


def display_name(name):
    """Title-case a normalized team name for use in a lyric line."""
    return name.title() if name else name


def render_position_line(position, player, tone):
    """
    Render the lyric line for one roster slot.

    Args:
        position (str): Free-form position label
        player (str): Player name
        tone (str): One of mild, medium, savage

    Returns:
        str: Lyric line
    """
    template_position = resolve_position(position)
    if template_position:
        template = POSITION_LINES[template_position].get(tone, POSITION_LINES[template_position]['medium'])
    else:
        template = GENERIC_LINES.get(tone, GENERIC_LINES['medium'])
    return template.format(player=player)


def render_opponent_line(position, player, tone):
    """Render an opponent slot, turning boasts into digs for harsher tones."""
    line = render_position_line(position, player, tone)
    if tone != 'mild':
        for phrase, replacement in OPPONENT_REWRITES:
            line = line.replace(phrase, replacement)
    return line


def render_lyrics(request, rng=None):
    """
    Render the full lyric sheet for a normalized generation request.

    Section headers are emitted as bracketed lines ("[Hook]") and sections
    are separated by blank lines. Empty rosters simply produce empty verses.

    Args:
        request (GenerationRequest): Normalized request
        rng (random.Random, optional): Source of randomness for the outro line

    Returns:
        str: Lyrics text
    """
    rng = rng or random
    style = GENRE_STYLES.get(request.genre, GENRE_STYLES['rap'])
    endings = TONE_ENDINGS.get(request.tone, TONE_ENDINGS['medium'])

    team_name = display_name(request.team_name)
    opponent_team_name = display_name(request.opponent_team_name)
    names = {'team_name': team_name, 'opponent_team_name': opponent_team_name}

    your_lines = [
        render_position_line(position, player, request.tone)
        for position, player in request.your_roster.items()
        if player
    ]
    opponent_lines = [
        render_opponent_line(position, player, request.tone)
        for position, player in request.opponent_roster.items()
        if player
    ]

    lines = [
        '[Intro]',
        style['intro'].format(**names),
        '',
        '[Verse 1 - Our Champions]',
        *your_lines[:MAX_VERSE_LINES],
        '',
        '[Hook]',
        style['hook'].format(**names),
        f"{opponent_team_name}, prepare for the fight!",
        '',
        '[Verse 2 - Their Struggle]',
        *opponent_lines[:MAX_VERSE_LINES],
        '',
        '[Bridge]',
        "When the dust settles and the game is done,",
        f"{team_name} stands tall, we're second to none!",
        '',
        '[Outro]',
        rng.choice(endings),
        f"{team_name} victory, loud and clear!",
    ]
    logger.debug(f"Rendered {len(lines)} lyric lines for genre={request.genre} tone={request.tone}")
    return '\n'.join(lines)


def filter_content(lyrics, rating_mode):
    """
    Filter lyrics for the requested content rating.

    Banned words are always masked; PG mode also softens mild profanity.

    Args:
        lyrics (str): Rendered lyrics
        rating_mode (str): 'PG' or 'NSFW'

    Returns:
        str: Filtered lyrics
    """
    filtered = lyrics
    for word in BANNED_WORDS:
        filtered = re.sub(rf'\b{re.escape(word)}\b', FILTERED_TOKEN, filtered, flags=re.IGNORECASE)

    if (rating_mode or '').upper() == 'PG':
        for word, replacement in PG_REPLACEMENTS:
            filtered = re.sub(rf'\b{re.escape(word)}\b', replacement, filtered, flags=re.IGNORECASE)

    return filtered

"""
Functions for building and parsing LRC lyric-timing files.

The timing is naive: the track duration is split evenly over the non-empty
lyric lines, section headers included.
"""
import logging
import math
import re
from typing import List, NamedTuple

logger = logging.getLogger(__name__)

LRC_LINE_RE = re.compile(r'\[(\d{2}):(\d{2})\.(\d{2})\](.*)')


class LrcEntry(NamedTuple):
    time: float
    text: str


def format_timestamp(seconds):
    """
    Format an offset as an LRC timestamp.

    Args:
        seconds (float): Offset in seconds

    Returns:
        str: Timestamp as ``MM:SS.CC``
    """
    total_centiseconds = int(round(seconds * 100))
    minutes, remainder = divmod(total_centiseconds, 6000)
    secs, centiseconds = divmod(remainder, 100)
    return f"{minutes:02d}:{secs:02d}.{centiseconds:02d}"


def build_lrc(lyrics, duration_sec):
    """
    Stamp each non-empty lyric line with an evenly spaced offset.

    Line ``i`` of ``n`` gets ``floor(i * duration_sec / n)`` seconds.

    Args:
        lyrics (str): Lyrics text, one line per row
        duration_sec (float): Track duration in seconds

    Returns:
        str: LRC text, empty when there are no lyric lines
    """
    lines = [line.rstrip() for line in (lyrics or '').split('\n') if line.strip()]
    if not lines:
        return ''

    lrc_lines = []
    for index, line in enumerate(lines):
        timestamp = math.floor(index * duration_sec / len(lines))
        lrc_lines.append(f"[{format_timestamp(timestamp)}]{line}")

    return '\n'.join(lrc_lines)


def parse_lrc(lrc_content) -> List[LrcEntry]:
    """
    Parse LRC text into timed entries.

    Lines that do not match ``[MM:SS.CC]text`` are skipped, so partially
    written files still yield whatever entries they contain.

    Args:
        lrc_content (str): LRC text

    Returns:
        list: ``LrcEntry`` items sorted by time, ties kept in file order
    """
    entries = []
    skipped = 0
    for line in (lrc_content or '').split('\n'):
        match = LRC_LINE_RE.match(line)
        if not match:
            if line.strip():
                skipped += 1
            continue
        minutes, seconds, centiseconds, text = match.groups()
        offset = int(minutes) * 60 + int(seconds) + int(centiseconds) / 100
        entries.append(LrcEntry(offset, text))

    if skipped:
        logger.debug(f"Skipped {skipped} malformed LRC lines")

    return sorted(entries, key=lambda entry: entry.time)

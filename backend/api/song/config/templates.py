"""
Lyric templates by genre, tone and roster position.
"""

GENRE_STYLES = {
    "country": {
        "intro": "Well howdy y'all, {team_name} ridin' in",
        "hook": "{team_name}! {team_name}! Gonna rope 'em up tight",
    },
    "rap": {
        "intro": "Yo, {team_name} in the house, bout to bring the heat",
        "hook": "{team_name} on top, we don't ever miss a beat",
    },
    "electronic": {
        "intro": "System loading, {team_name} activated",
        "hook": "Beat drop, {team_name}, we're elevated",
    },
    "pop": {
        "intro": "Turn it up, {team_name} here to play",
        "hook": "{team_name}, {team_name}, gonna win this game!",
    },
    "blues": {
        "intro": "Got them {opponent_team_name} blues, {team_name} here to play",
        "hook": "Sing it loud, {team_name}, this is our day",
    },
    "funk": {
        "intro": "Get on up, {team_name} got that funky flow",
        "hook": "Funk it up, {team_name}, let the good times roll",
    },
    "rnb": {
        "intro": "Smooth like silk, {team_name} here tonight",
        "hook": "Oh yeah, {team_name}, we're reaching new heights",
    },
    "gospel": {
        "intro": "Hallelujah, {team_name} blessed to play",
        "hook": "Praise the game, {team_name}, this is our day",
    },
    "rock": {
        "intro": "Crank the amps, {team_name} took the stage",
        "hook": "{team_name} rocks the league, we're the headline page",
    },
    "reggae": {
        "intro": "Easy now, {team_name} feelin' irie today",
        "hook": "One love, {team_name}, we gonna win the day",
    },
}

# Tone-specific outro lines
TONE_ENDINGS = {
    "mild": ["Good game coming up", "May the best team win", "See you on the field"],
    "medium": ["Bring your A-game", "Time to settle this", "Game on!"],
    "savage": ["No mercy given", "Prepare for defeat", "Domination incoming"],
}

POSITION_LINES = {
    "QB": {
        "mild": "{player} throws with precision",
        "medium": "{player} commands the field",
        "savage": "{player} is surgical with those passes",
    },
    "RB": {
        "mild": "{player} runs through the gaps",
        "medium": "{player} breaks through the line",
        "savage": "{player} tramples the defense",
    },
    "WR": {
        "mild": "{player} catches passes clean",
        "medium": "{player} burns the secondary",
        "savage": "{player} leaves defenders in the dust",
    },
    "TE": {
        "mild": "{player} reliable in the middle",
        "medium": "{player} splits the seams wide",
        "savage": "{player} unstoppable over the middle",
    },
    "FLEX": {
        "mild": "{player} adds versatility",
        "medium": "{player} brings the extra punch",
        "savage": "{player} is the ultimate weapon",
    },
    "K": {
        "mild": "{player} kicks them through",
        "medium": "{player} splits the uprights",
        "savage": "{player} never misses when it counts",
    },
    "DEF": {
        "mild": "{player} plays solid defense",
        "medium": "{player} shuts down the offense",
        "savage": "{player} creates chaos and mayhem",
    },
}

# Used for any position label we have no template for
GENERIC_LINES = {
    "mild": "{player} shows up to play",
    "medium": "{player} makes the big plays",
    "savage": "{player} takes over the game",
}

POSITION_ALIASES = {
    "WRT": "FLEX",
    "W/R/T": "FLEX",
    "SUPERFLEX": "FLEX",
    "DST": "DEF",
    "D/ST": "DEF",
    "PK": "K",
}

# Phrases softened in the opponent verse for medium and savage tones
OPPONENT_REWRITES = [
    ("commands", "struggles to command"),
    ("burns", "tries to burn"),
    ("breaks through", "gets stopped at"),
    ("dominates", "hopes to compete"),
    ("demolishes", "barely challenges"),
]

BANNED_WORDS = ['injury', 'hurt', 'damage', 'harm']

PG_REPLACEMENTS = [
    ('damn', 'darn'),
    ('hell', 'heck'),
    ('crap', 'crud'),
]


def resolve_position(label):
    """
    Map a free-form roster position label to a template position.

    Args:
        label (str): Position label as it appears on the roster, e.g. "WR_2"

    Returns:
        str: Template position key, or None if no template matches
    """
    base = label.strip().upper()
    base = base.rstrip('0123456789').rstrip('_- ')
    base = POSITION_ALIASES.get(base, base)
    if base in POSITION_LINES:
        return base
    return None

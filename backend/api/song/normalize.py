"""
Normalization and content hashing of song generation requests.

Two requests that differ only in whitespace, letter case of the free-text
fields, or punctuation in player names normalize to the same
``GenerationRequest`` and therefore to the same input hash. The hash is the
only identity used for deduplication.
"""
import hashlib
import json
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

PUNCTUATION_RE = re.compile(r'[^\w\s]')
WHITESPACE_RE = re.compile(r'\s+')

DEFAULT_VOCAL_GENDER = 'male'


@dataclass(frozen=True)
class GenerationRequest:
    """Normalized, hashable input of one song generation."""
    team_name: str
    opponent_team_name: str
    your_roster: Dict[str, str] = field(default_factory=dict)
    opponent_roster: Dict[str, str] = field(default_factory=dict)
    genre: str = 'rap'
    tone: str = 'medium'
    persona: str = 'narrator'
    rating_mode: str = 'PG'
    vocal_gender: str = DEFAULT_VOCAL_GENDER

    def to_dict(self) -> Dict[str, Any]:
        """JSON-serializable form, used as the queue payload."""
        data = asdict(self)
        data['your_roster'] = dict(self.your_roster)
        data['opponent_roster'] = dict(self.opponent_roster)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'GenerationRequest':
        return cls(
            team_name=data['team_name'],
            opponent_team_name=data['opponent_team_name'],
            your_roster=dict(data.get('your_roster') or {}),
            opponent_roster=dict(data.get('opponent_roster') or {}),
            genre=data.get('genre', 'rap'),
            tone=data.get('tone', 'medium'),
            persona=data.get('persona', 'narrator'),
            rating_mode=data.get('rating_mode', 'PG'),
            vocal_gender=data.get('vocal_gender') or DEFAULT_VOCAL_GENDER,
        )


def normalize_string(value: Optional[str]) -> str:
    """Trim, lower-case and collapse internal whitespace."""
    if not value:
        return ""
    return WHITESPACE_RE.sub(' ', str(value).strip().lower())


def normalize_player_name(name: Optional[str]) -> str:
    """Strip punctuation and collapse whitespace, keeping the letter case.

    "  Amon-Ra  St. Brown " becomes "AmonRa St Brown".
    """
    if not name:
        return ""
    stripped = PUNCTUATION_RE.sub('', str(name).strip())
    return WHITESPACE_RE.sub(' ', stripped).strip()


def normalize_roster(roster: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """Normalize player names; position labels are kept verbatim and in order."""
    if not roster:
        return {}
    return {str(position): normalize_player_name(player) for position, player in roster.items()}


def normalize_request(raw: Mapping[str, Any]) -> GenerationRequest:
    """
    Build a normalized ``GenerationRequest`` from raw request data.

    Args:
        raw (Mapping): Raw request fields, e.g. validated API input

    Returns:
        GenerationRequest: The normalized request
    """
    return GenerationRequest(
        team_name=normalize_string(raw.get('team_name')),
        opponent_team_name=normalize_string(raw.get('opponent_team_name')),
        your_roster=normalize_roster(raw.get('your_roster')),
        opponent_roster=normalize_roster(raw.get('opponent_roster')),
        genre=normalize_string(raw.get('genre')),
        tone=normalize_string(raw.get('tone')),
        persona=normalize_string(raw.get('persona')),
        rating_mode=str(raw.get('rating_mode') or '').strip().upper(),
        vocal_gender=normalize_string(raw.get('vocal_gender')) or DEFAULT_VOCAL_GENDER,
    )


def canonical_json(request: GenerationRequest) -> str:
    """Serialize a request with every mapping's keys sorted."""
    return json.dumps(request.to_dict(), sort_keys=True, separators=(',', ':'), ensure_ascii=False)


def compute_input_hash(request: GenerationRequest) -> str:
    """
    Fingerprint a normalized request.

    Args:
        request (GenerationRequest): Already normalized request

    Returns:
        str: 64 character hexadecimal SHA-256 digest
    """
    return hashlib.sha256(canonical_json(request).encode('utf-8')).hexdigest()


def normalize_and_hash(raw: Mapping[str, Any]) -> Tuple[GenerationRequest, str]:
    """Normalize raw request data and return it with its input hash."""
    request = normalize_request(raw)
    return request, compute_input_hash(request)

"""
@mention detection, autocomplete and extraction.

Detection works on the text left of the cursor: the active mention is the
last '@' that starts the text or follows a space/newline, with no
whitespace between it and the cursor.

Extraction resolves `@Full Name` spans against the roster by exact name.
The pattern is greedy (it keeps swallowing following words), so each span
is resolved to the longest leading run of words that is a member's name.
Two members whose names are equal, or where one is a word-prefix of the
other followed by more text, still cannot be told apart.
"""

import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..models import TeamMember

MENTION_PATTERN = re.compile(r"@(\w+(?:\s+\w+)*)")
_WORD = re.compile(r"\w+")
_LEADING_MENTION = re.compile(r"^@\S*")


@dataclass
class MentionMatch:
    start: int  # index of '@'
    end: int  # cursor position
    query: str


@dataclass
class MentionSuggestion:
    id: str
    name: str
    avatar: Optional[str] = None
    role: Optional[str] = None


@dataclass
class MentionSegment:
    """A run of text; mention segments include the '@'."""
    text: str
    is_mention: bool = False
    valid: bool = False
    member_id: Optional[str] = None


def detect_mention(text: str, cursor: int) -> Optional[MentionMatch]:
    """The mention being typed at the cursor, if any."""
    before_cursor = text[:cursor]
    at_index = before_cursor.rfind("@")
    if at_index == -1:
        return None

    if at_index > 0 and text[at_index - 1] not in (" ", "\n"):
        return None

    query = text[at_index + 1:cursor]
    if " " in query or "\n" in query:
        return None

    return MentionMatch(start=at_index, end=cursor, query=query)


def _role(member: TeamMember) -> str:
    return getattr(member.role, "value", member.role) or ""


def get_suggestions(members: Iterable[TeamMember], query: str = "") -> List[MentionSuggestion]:
    """Members whose name or role contains the query (case-insensitive); all of them for an empty query."""
    q = query.lower()
    return [
        MentionSuggestion(id=m.id, name=m.name, avatar=m.avatar, role=_role(m))
        for m in members
        if not q or q in m.name.lower() or q in _role(m).lower()
    ]


def insert_mention(text: str, name: str, mention_start: int) -> Tuple[str, int]:
    """
    Replace the partial mention at mention_start with '@name '.

    Returns the new text and the cursor position right after the inserted
    space.
    """
    before = text[:mention_start]
    after = _LEADING_MENTION.sub("", text[mention_start:], count=1)
    mention = f"@{name}"
    new_text = before + mention + " " + after
    return new_text, len(before) + len(mention) + 1


def _resolve(span: str, by_name: Dict[str, TeamMember]) -> Optional[Tuple[TeamMember, int]]:
    """Longest leading run of words in span that is exactly a member name."""
    ends = [m.end() for m in _WORD.finditer(span)]
    for end in reversed(ends):
        member = by_name.get(span[:end])
        if member is not None:
            return member, end
    return None


def extract_mentions(text: str, members: Iterable[TeamMember]) -> List[str]:
    """Ids of the members mentioned in text, in order of first mention, without repeats."""
    by_name = {m.name: m for m in members}
    found: List[str] = []

    for match in MENTION_PATTERN.finditer(text):
        resolved = _resolve(match.group(1), by_name)
        if resolved is not None and resolved[0].id not in found:
            found.append(resolved[0].id)
    return found


def split_mentions(text: str, members: Iterable[TeamMember]) -> List[MentionSegment]:
    """
    Split text into plain and mention segments for display.

    Resolved mentions cover just the member's name; unresolved ones cover
    the whole matched span and are marked invalid.
    """
    by_name = {m.name: m for m in members}
    segments: List[MentionSegment] = []
    last = 0

    for match in MENTION_PATTERN.finditer(text):
        if match.start() > last:
            segments.append(MentionSegment(text=text[last:match.start()]))

        resolved = _resolve(match.group(1), by_name)
        if resolved is None:
            segments.append(MentionSegment(text=match.group(0), is_mention=True))
            last = match.end()
            continue

        member, length = resolved
        end = match.start(1) + length
        segments.append(MentionSegment(text=text[match.start():end], is_mention=True, valid=True, member_id=member.id))
        last = end

    if last < len(text):
        segments.append(MentionSegment(text=text[last:]))
    return segments or [MentionSegment(text=text)]

"""
Chat line classification.

Decides whether a raw chat line is a player utterance worth translating and,
if so, who said it. Everything here is pure; logging is left to the caller.
"""

import re
from typing import Optional, Union

from chatranslator.core.models import Ignored, PlayerUtterance

# Markers the formatter puts on our own output
SELF_TRANSLATION_MARKERS = ("[原文]", "[译文]", "[译]")

SYSTEM_MESSAGE_PATTERN = re.compile(
    r"^\[系统\]|^\[译|^\[原文]|\[(.+)加入了游戏\]|\[(.+)离开了游戏\]"
    r"|^(?:\[[^\]]+\]\s*)?\w{1,16} (?:joined|left) the game$"
)

# <Player> message
PLAYER_MESSAGE_PATTERN = re.compile(r"^<([^>]+)>\s+(.+)$", re.DOTALL)

# [CHAT] <Player> message, or any other bracketed tag in front
ALT_PLAYER_MESSAGE_PATTERN = re.compile(r"^\[[^\]]+\]\s+<([^>]+)>\s+(.+)$", re.DOTALL)

# Last angle-bracket group wins; used when the line has other decoration
LOOSE_PLAYER_MESSAGE_PATTERN = re.compile(r".*<([^>]+)>\s*(.+)", re.DOTALL)

CJK_PATTERN = re.compile(r"[\u4e00-\u9fff]")

# Common Chinese internet abbreviations that need no translation
CHINESE_ABBREVIATIONS = frozenset(
    ["gg", "nb", "xswl", "nmsl", "sb", "lz", "fvv", "fw", "233"]
)

_ABBREVIATION_PATTERN = re.compile(
    r"^\s*(?:"
    + "|".join(re.escape(a) for a in sorted(CHINESE_ABBREVIATIONS))
    + r")\s*[!?,.。！？，]*\s*$"
)

ClassifyResult = Union[Ignored, PlayerUtterance]


def is_command(text: str) -> bool:
    return text.startswith("/")


def is_self_translation(text: str) -> bool:
    return any(marker in text for marker in SELF_TRANSLATION_MARKERS)


def is_system_message(text: str) -> bool:
    return SYSTEM_MESSAGE_PATTERN.search(text) is not None


def contains_cjk(text: str) -> bool:
    return bool(text) and CJK_PATTERN.search(text) is not None


def is_chinese_abbreviation(text: str) -> bool:
    if not text:
        return False
    normalized = text.lower().strip()
    if normalized in CHINESE_ABBREVIATIONS:
        return True
    return _ABBREVIATION_PATTERN.match(normalized) is not None


def should_skip_translation(content: str) -> bool:
    """True when content is empty or already reads as Chinese."""
    if not content or not content.strip():
        return True
    return contains_cjk(content) or is_chinese_abbreviation(content)


def extract_sender_and_content(line: str) -> tuple[Optional[str], Optional[str]]:
    """Pull (sender, content) out of a chat line.

    Tries the plain `<name> message` form first, then `[TAG] <name> message`,
    and finally takes the last `<...>` group when the line has both brackets.
    Returns (None, None) when nothing matches.
    """
    match = PLAYER_MESSAGE_PATTERN.match(line) or ALT_PLAYER_MESSAGE_PATTERN.match(line)
    if match is None and "<" in line and ">" in line:
        match = LOOSE_PLAYER_MESSAGE_PATTERN.match(line)
    if match is None:
        return None, None
    return match.group(1).strip(), match.group(2).strip()


def classify(
    line: str,
    *,
    self_name: Optional[str] = None,
    allow_unattributed: bool = True,
) -> ClassifyResult:
    """Classify one raw chat line. First matching rule wins."""
    text = (line or "").strip()
    if not text:
        return Ignored("empty")

    if is_self_translation(text):
        return Ignored("own translation output")
    if is_command(text):
        return Ignored("command")
    if is_system_message(text):
        return Ignored("system message")

    sender, content = extract_sender_and_content(text)
    if content is not None:
        if not content:
            return Ignored("empty content")
        if is_command(content):
            return Ignored("command")
    else:
        # Nothing looked like a player line; best effort, keep it unattributed
        if not allow_unattributed:
            return Ignored("no sender")
        if "/" in text:
            return Ignored("unattributed line with a slash")
        sender, content = None, text

    if sender is not None and self_name and sender.lower() == self_name.lower():
        return Ignored("own message")

    if contains_cjk(content):
        return Ignored("already chinese")
    if is_chinese_abbreviation(content):
        return Ignored("chinese abbreviation")

    return PlayerUtterance(sender=sender, content=content)

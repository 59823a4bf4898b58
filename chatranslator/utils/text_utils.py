DISCORD_MESSAGE_LIMIT = 2000


def format_translation(sender: str, original: str, translated: str, show_original: bool) -> str:
    """
    Render a translated chat line.

    The [原文]/[译文]/[译] tags double as the marker the classifier uses to
    recognise our own output, so keep them in sync with SELF_TRANSLATION_MARKERS.
    """
    if show_original:
        return f"<{sender}> [原文] {original}\n<{sender}> [译文] {translated}"
    return f"<{sender}> [译] {translated}"


def split_message(text: str, limit: int = DISCORD_MESSAGE_LIMIT) -> list[str]:
    """Break text into pieces Discord will accept, preferring line boundaries."""
    pieces = []
    current = ""
    for line in text.splitlines(keepends=True):
        if len(current) + len(line) <= limit:
            current += line
            continue
        if current:
            pieces.append(current)
        # Lines over the limit are cut hard
        while len(line) > limit:
            pieces.append(line[:limit])
            line = line[limit:]
        current = line
    if current:
        pieces.append(current)
    return pieces

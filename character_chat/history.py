"""Word-budget trimming of conversation history."""

import logging

from character_chat.models import ChatMessage, Message, count_words

logger = logging.getLogger(__name__)

MAX_WORD_SIZE = 2000


def limit_messages_size(
    sys_entry: Message,
    messages: list[ChatMessage],
    max_words: int = MAX_WORD_SIZE,
) -> list[Message]:
    """Return [sys_entry] followed by the longest recent history that fits max_words.

    Error entries are never replayed. History is walked newest to oldest and
    the walk stops at the first entry that would bring the total to max_words
    or more, so the kept part is always a contiguous tail in original order.
    """
    replayable = [m for m in messages if m.role != "error"]

    total = count_words(sys_entry.content)
    logger.debug("system entry size in words is %d", total)

    start = len(replayable)
    for i in range(len(replayable) - 1, -1, -1):
        size = replayable[i].word_count
        if total + size >= max_words:
            break
        total += size
        start = i

    logger.debug("prompt size in words is %d (%d of %d messages)",
                 total, len(replayable) - start, len(replayable))

    kept = [
        Message(role=m.role, content=m.content.to_prompt_text())
        for m in replayable[start:]
    ]
    return [sys_entry, *kept]

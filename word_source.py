"""
Word Source: picks the secret word for a round.

WordSource asks an OpenAI-compatible text-generation endpoint for one
guessable noun related to the caller's theme and raises on any problem.
pick_word() is what the game calls: it owns the timeout and falls back to a
fixed list on failure, on an empty theme, or on a theme mentioning "random".
"""

import asyncio
import random
import re
from typing import Optional, Sequence

from openai import AsyncOpenAI

from constants import FALLBACK_WORDS, OPENAI_API_KEY, OPENAI_BASE_URL, WORD_MODEL, WORD_SOURCE_TIMEOUT_SEC
from logging_config import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You pick words for a Pictionary game played over the phone. "
    "Reply with a single common noun (one or two words) that is easy to draw "
    "and relates to the given theme. Reply with the word only, no punctuation."
)

_RANDOM_THEME = re.compile(r"random", re.IGNORECASE)
_NOT_WORD = re.compile(r"[^\w\s'-]")


class WordSourceError(Exception):
    pass


def clean_word(raw: Optional[str]) -> str:
    """First line of the model output, without quotes, punctuation or a trailing period."""
    lines = [ln.strip() for ln in (raw or "").splitlines() if ln.strip()]
    if not lines:
        return ""
    word = _NOT_WORD.sub("", lines[0]).strip().lower()
    # Anything longer than a short phrase is the model ignoring instructions
    if len(word.split()) > 3:
        return ""
    return word


class WordSource:
    def __init__(
        self,
        api_key: Optional[str] = OPENAI_API_KEY,
        base_url: Optional[str] = OPENAI_BASE_URL,
        model: str = WORD_MODEL,
    ):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url) if api_key else None
        if self.client is None:
            logger.info("No OPENAI_API_KEY configured, words will come from the fallback list")

    async def generate_word(self, theme: str) -> str:
        if self.client is None:
            raise WordSourceError("text generation is not configured")

        response = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Theme: {theme}"},
            ],
            max_tokens=10,
            temperature=1.0,
        )
        word = clean_word(response.choices[0].message.content)
        if not word:
            raise WordSourceError(f"no usable word in response: {response.choices[0].message.content!r}")
        return word


async def pick_word(
    source,
    theme: Optional[str],
    timeout: float = WORD_SOURCE_TIMEOUT_SEC,
    fallback_words: Sequence[str] = FALLBACK_WORDS,
) -> str:
    theme = (theme or "").strip()
    if not theme or _RANDOM_THEME.search(theme):
        logger.debug(f"Theme {theme!r} asks for a random word")
        return random.choice(fallback_words)

    try:
        word = await asyncio.wait_for(source.generate_word(theme), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"Word generation timed out after {timeout}s for theme {theme!r}, using fallback list")
        return random.choice(fallback_words)
    except Exception as e:
        logger.warning(f"Word generation failed for theme {theme!r}, using fallback list: {e}")
        return random.choice(fallback_words)

    if not word or not word.strip():
        logger.warning(f"Word generation returned an empty word for theme {theme!r}, using fallback list")
        return random.choice(fallback_words)
    logger.info(f"Generated word for theme {theme!r}")
    return word

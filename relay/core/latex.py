"""Conservative LaTeX delimiter fix-up for model output.

Models are told to wrap formulas in ``$``/``$$`` but sometimes return bare
LaTeX. When a reply has no dollar sign at all yet clearly contains LaTeX
control sequences, the whole reply is wrapped as block math. Fenced code
blocks are pulled out first so their contents are never inspected or changed.
"""

from __future__ import annotations

import re
from typing import Any, List, NamedTuple


FENCE_PATTERN = re.compile(r"```[\s\S]*?```")

PLACEHOLDER_PREFIX = "___CODEBLOCK_"
PLACEHOLDER_SUFFIX = "___"
PLACEHOLDER_PATTERN = re.compile(
    re.escape(PLACEHOLDER_PREFIX) + r"([0-9]+)" + re.escape(PLACEHOLDER_SUFFIX)
)

# ASCII word boundaries: "\pi是" must still count as \pi.
LATEX_INDICATOR_PATTERN = re.compile(
    r"\\(?:frac|int|sum|sqrt|left|right|begin|end|pi|alpha|beta|gamma)\b"
    r"|\^\{"
    r"|\\\("
    r"|\\\)",
    re.ASCII,
)


class ExtractedText(NamedTuple):
    text: str
    blocks: List[str]


def _placeholder(index: int) -> str:
    return f"{PLACEHOLDER_PREFIX}{index}{PLACEHOLDER_SUFFIX}"


def extract_code_blocks(text: str) -> ExtractedText:
    """Replace each fenced code block with a numbered placeholder.

    Fences match lazily, so a block ends at the nearest closing fence. An
    unterminated fence is left in place as ordinary text.
    """
    blocks: List[str] = []

    def _stash(match: re.Match) -> str:
        blocks.append(match.group(0))
        return _placeholder(len(blocks) - 1)

    return ExtractedText(FENCE_PATTERN.sub(_stash, text), blocks)


def restore_code_blocks(text: str, blocks: List[str]) -> str:
    """Put extracted blocks back in place of their placeholders.

    Placeholders with no matching block are kept verbatim.
    """
    if not blocks:
        return text

    by_index = {str(i): block for i, block in enumerate(blocks)}

    def _restore(match: re.Match) -> str:
        return by_index.get(match.group(1), match.group(0))

    return PLACEHOLDER_PATTERN.sub(_restore, text)


def needs_math_wrap(text: str) -> bool:
    """Return True when ``text`` looks like undelimited LaTeX.

    Any dollar sign means the author already chose delimiters, so nothing is
    wrapped in that case, even if the dollar is a currency sign.
    """
    if "$" in text:
        return False
    return LATEX_INDICATOR_PATTERN.search(text) is not None


def wrap_latex_if_needed(text: Any) -> Any:
    if not text or not isinstance(text, str):
        return text

    extracted = extract_code_blocks(text)
    body = extracted.text
    if needs_math_wrap(body):
        body = f"$$\n{body}\n$$"
    return restore_code_blocks(body, extracted.blocks)

# Text Locator
#
# Re-anchors a chunk of text (possibly re-joined or re-punctuated by the
# segmenter) to its [start, end) character range in the original source.
#
# The scan walks source and chunk in lock-step, tolerating:
#   - whitespace runs of different length or kind on either side
#   - punctuation present on one side only (separators injected or dropped)
# A genuine mismatch restarts the scan one character past the last match
# start. Worst case O(n*m), near-linear on near-identical text.

from typing import Optional

from core.service_interfaces import TextSpan
from core.validation_and_errors import AnchorFailure


SEPARATOR_PUNCTUATION = frozenset(".,!?;")


def locate(source: str, chunk: str, from_index: int = 0) -> Optional[TextSpan]:
    """Return the span of `source` matching `chunk`, or None if it cannot be anchored."""
    t_idx = max(from_index, 0)
    s_idx = 0
    match_start = -1
    t_len = len(source)
    s_len = len(chunk)

    while t_idx < t_len and s_idx < s_len:
        t_char = source[t_idx]
        s_char = chunk[s_idx]

        if t_char == s_char:
            if match_start == -1:
                match_start = t_idx
            t_idx += 1
            s_idx += 1
            continue

        t_space = t_char.isspace()
        s_space = s_char.isspace()

        if t_space and s_space:
            while t_idx < t_len and source[t_idx].isspace():
                t_idx += 1
            while s_idx < s_len and chunk[s_idx].isspace():
                s_idx += 1
            continue
        if t_space:
            t_idx += 1
            continue
        if s_space:
            s_idx += 1
            continue

        s_punct = s_char in SEPARATOR_PUNCTUATION
        t_punct = t_char in SEPARATOR_PUNCTUATION
        if s_punct and not t_punct:
            s_idx += 1
            continue
        if t_punct and not s_punct:
            t_idx += 1
            continue

        # Genuine mismatch
        if match_start != -1:
            t_idx = match_start + 1
            s_idx = 0
            match_start = -1
        else:
            t_idx += 1

    # Source exhausted: a chunk tail of separators only still counts as matched
    if match_start != -1:
        while s_idx < s_len and (chunk[s_idx].isspace() or chunk[s_idx] in SEPARATOR_PUNCTUATION):
            s_idx += 1

    if s_idx >= s_len and match_start != -1:
        return TextSpan(start=match_start, end=t_idx)
    return None


class TextLocator:
    """Object wrapper around `locate` for injection into the retriever"""

    def locate(self, source: str, chunk: str, from_index: int = 0) -> Optional[TextSpan]:
        return locate(source, chunk, from_index)

    def locate_or_raise(self, source: str, chunk: str, from_index: int = 0) -> TextSpan:
        span = locate(source, chunk, from_index)
        if span is None:
            preview = chunk[:40]
            raise AnchorFailure(f"Could not align chunk to source: {preview!r}")
        return span

"""Locate an LLM-supplied snippet inside a document.

Strategy cascade, most literal to most tolerant:

1. exact substring
2. whitespace-normalized (runs of spaces/tabs collapsed, trailing ws dropped)
3. line-trimmed (every line stripped, compared as a sequence)
4. fuzzy similarity (per-line edit distance via diff-match-patch)

Each stage must produce exactly one region. Several equally good regions are
never resolved by picking one: the stage yields no decision and, if every
stage fails, the ambiguity is reported with the competing line ranges.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from diff_match_patch import diff_match_patch

from editcore.config import MatcherConfig
from editcore.types import MatchCandidate, MatchLocation, MatchResult, MatchStrategy

STAGE_LABELS = {
    MatchStrategy.EXACT: "exact-match",
    MatchStrategy.WHITESPACE_NORMALIZED: "whitespace-normalized",
    MatchStrategy.LINE_TRIMMED: "line-trimmed",
    MatchStrategy.FUZZY_SIMILARITY: "fuzzy-similarity",
}


@dataclass(frozen=True)
class TextLine:
    """One line of a document; ``end`` excludes the line terminator."""

    number: int
    start: int
    end: int
    text: str

    @property
    def stripped(self) -> str:
        return self.text.strip()


def split_lines(text: str) -> list[TextLine]:
    """Split on ``\\n`` only, keeping offsets; a trailing ``\\r`` is not content."""
    lines: list[TextLine] = []
    start = 0
    while start < len(text):
        newline = text.find("\n", start)
        if newline == -1:
            body_end = next_start = len(text)
        else:
            body_end, next_start = newline, newline + 1
        if body_end > start and text[body_end - 1] == "\r":
            body_end -= 1
        lines.append(TextLine(len(lines) + 1, start, body_end, text[start:body_end]))
        start = next_start
    return lines


def normalize_whitespace(text: str) -> tuple[str, list[int]]:
    """Collapse horizontal whitespace runs and drop trailing whitespace per line.

    Returns the normalized text and a parallel index array: ``index_map[k]`` is
    the offset in ``text`` of normalized character ``k``.
    """
    chars: list[str] = []
    index_map: list[int] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch != "\n" and ch.isspace():
            j = i + 1
            while j < n and text[j] != "\n" and text[j].isspace():
                j += 1
            # Runs that reach a newline or end of text are trailing: dropped
            if j < n and text[j] != "\n":
                chars.append(" ")
                index_map.append(i)
            i = j
            continue
        chars.append(ch)
        index_map.append(i)
        i += 1
    return "".join(chars), index_map


def find_all(haystack: str, needle: str) -> list[int]:
    """All start offsets of ``needle``, overlapping occurrences included."""
    positions: list[int] = []
    if not needle:
        return positions
    pos = haystack.find(needle)
    while pos != -1:
        positions.append(pos)
        pos = haystack.find(needle, pos + 1)
    return positions


def trimmed_search_lines(search_text: str) -> list[str]:
    """Stripped search lines with blank lines at both edges removed."""
    lines = [line.stripped for line in split_lines(search_text)]
    while lines and not lines[0]:
        lines.pop(0)
    while lines and not lines[-1]:
        lines.pop()
    return lines


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[:max_len] + f"... [truncated, {len(text) - max_len} more chars]"


@dataclass
class _Attempt:
    """Per-call scratch state shared by the stages of one find_match."""

    document: str
    lines: list[TextLine]
    line_starts: list[int]
    candidates: dict[tuple[int, int], float] = field(default_factory=dict)
    ambiguity: tuple[MatchStrategy, int] | None = None

    def location(self, start: int, end: int) -> MatchLocation:
        start_line = bisect.bisect_right(self.line_starts, start)
        end_line = bisect.bisect_right(self.line_starts, max(start, end - 1))
        return MatchLocation(
            start_offset=start,
            end_offset=end,
            start_line=start_line,
            end_line=end_line,
        )

    def add_candidate(self, start_line: int, end_line: int, score: float) -> None:
        key = (start_line, end_line)
        if score > self.candidates.get(key, -1.0):
            self.candidates[key] = score

    def note_ambiguity(self, strategy: MatchStrategy, regions: list[MatchLocation]) -> None:
        for loc in regions:
            self.add_candidate(loc.start_line, loc.end_line, 1.0)
        if self.ambiguity is None:
            self.ambiguity = (strategy, len(regions))


class FuzzyMatcher:
    """Find the unique region of a document a search snippet refers to."""

    def __init__(self, config: MatcherConfig | None = None):
        self.config = config or MatcherConfig()
        self._dmp = diff_match_patch()
        # Lines are short; let diffs run to completion for stable scores
        self._dmp.Diff_Timeout = 0

    def find_match(self, search_text: str, document: str) -> MatchResult:
        """Run the strategy cascade and return the first unambiguous match."""
        if not search_text or not search_text.strip():
            return MatchResult.not_found("Search text is empty; nothing to match.")

        attempt = _Attempt(
            document=document,
            lines=split_lines(document),
            line_starts=[0] + [i + 1 for i, ch in enumerate(document) if ch == "\n"],
        )

        for strategy in MatchStrategy:
            if strategy is MatchStrategy.EXACT:
                result = self._match_exact(search_text, attempt)
            elif strategy is MatchStrategy.WHITESPACE_NORMALIZED:
                result = self._match_normalized(search_text, attempt)
            elif strategy is MatchStrategy.LINE_TRIMMED:
                result = self._match_line_trimmed(search_text, attempt)
            else:
                result = self._match_similar(search_text, attempt)
            if result is not None:
                return result

        return self._failure(search_text, attempt)

    # ------------------------------------------------------------------
    # Stages: each returns a MatchResult on a unique match, else None
    # ------------------------------------------------------------------

    def _match_exact(self, search_text: str, attempt: _Attempt) -> MatchResult | None:
        positions = find_all(attempt.document, search_text)
        regions = [attempt.location(pos, pos + len(search_text)) for pos in positions]
        return self._decide(MatchStrategy.EXACT, regions, attempt)

    def _match_normalized(self, search_text: str, attempt: _Attempt) -> MatchResult | None:
        norm_search, _ = normalize_whitespace(search_text)
        if not norm_search.strip():
            return None
        norm_doc, index_map = normalize_whitespace(attempt.document)
        regions = []
        for pos in find_all(norm_doc, norm_search):
            start = index_map[pos]
            end = index_map[pos + len(norm_search) - 1] + 1
            regions.append(attempt.location(start, end))
        return self._decide(MatchStrategy.WHITESPACE_NORMALIZED, regions, attempt)

    def _match_line_trimmed(self, search_text: str, attempt: _Attempt) -> MatchResult | None:
        wanted = trimmed_search_lines(search_text)
        lines = attempt.lines
        size = len(wanted)
        if not size or size > len(lines):
            return None
        regions = []
        for i in range(len(lines) - size + 1):
            if all(lines[i + k].stripped == wanted[k] for k in range(size)):
                regions.append(attempt.location(lines[i].start, lines[i + size - 1].end))
        return self._decide(MatchStrategy.LINE_TRIMMED, regions, attempt)

    def _match_similar(self, search_text: str, attempt: _Attempt) -> MatchResult | None:
        wanted = trimmed_search_lines(search_text)
        lines = attempt.lines
        size = len(wanted)
        if not size or size > len(lines):
            return None

        cfg = self.config
        # Windows that cannot reach this bound can neither win, nor spoil the
        # margin, nor be worth listing as a candidate
        floor = min(cfg.candidate_floor, cfg.similarity_threshold - cfg.min_margin)
        cache: dict[tuple[str, str], float] = {}
        scored: list[tuple[float, int]] = []

        for i in range(len(lines) - size + 1):
            total = 0.0
            for k in range(size):
                total += self._line_similarity(wanted[k], lines[i + k].stripped, cache)
                if (total + (size - k - 1)) / size < floor:
                    break
            else:
                scored.append((total / size, i))

        if not scored:
            return None

        scored.sort(key=lambda item: (-item[0], item[1]))
        best, best_index = scored[0]
        second = scored[1][0] if len(scored) > 1 else 0.0

        for score, i in scored[: cfg.max_candidates]:
            if score >= cfg.candidate_floor:
                attempt.add_candidate(i + 1, i + size, score)

        if best > cfg.similarity_threshold and best - second >= cfg.min_margin:
            first, last = lines[best_index], lines[best_index + size - 1]
            return MatchResult.found(
                MatchStrategy.FUZZY_SIMILARITY,
                attempt.location(first.start, last.end),
                score=round(best, 4),
            )

        if best > cfg.similarity_threshold:
            tied = [i for score, i in scored if best - score < cfg.min_margin]
            if attempt.ambiguity is None:
                attempt.ambiguity = (MatchStrategy.FUZZY_SIMILARITY, len(tied))
        return None

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _decide(
        self,
        strategy: MatchStrategy,
        regions: list[MatchLocation],
        attempt: _Attempt,
    ) -> MatchResult | None:
        if len(regions) == 1:
            return MatchResult.found(strategy, regions[0])
        if len(regions) > 1:
            attempt.note_ambiguity(strategy, regions)
        return None

    def _line_similarity(self, a: str, b: str, cache: dict[tuple[str, str], float]) -> float:
        """Normalized edit-distance similarity of two stripped lines, in [0, 1]."""
        if a == b:
            return 1.0
        key = (a, b)
        if key in cache:
            return cache[key]
        longest = max(len(a), len(b))
        # Edit distance is at least the length difference
        if 1.0 - abs(len(a) - len(b)) / longest <= 0.0:
            score = 0.0
        else:
            diffs = self._dmp.diff_main(a, b, False)
            score = max(0.0, 1.0 - self._dmp.diff_levenshtein(diffs) / longest)
        cache[key] = score
        return score

    def _excerpt(self, attempt: _Attempt, start_line: int, end_line: int) -> str:
        limit = self.config.excerpt_lines
        shown = attempt.lines[start_line - 1 : min(end_line, start_line - 1 + limit)]
        text = "\n".join(line.text for line in shown)
        hidden = end_line - start_line + 1 - len(shown)
        if hidden > 0:
            text += f"\n... ({hidden} more lines)"
        return text

    def _failure(self, search_text: str, attempt: _Attempt) -> MatchResult:
        cfg = self.config
        ranked = sorted(attempt.candidates.items(), key=lambda item: (-item[1], item[0]))
        candidates = tuple(
            MatchCandidate(
                start_line=start_line,
                end_line=end_line,
                score=round(score, 4),
                excerpt=self._excerpt(attempt, start_line, end_line),
            )
            for (start_line, end_line), score in ranked[: cfg.max_candidates]
        )

        parts = [
            "Could not find a unique match for the SEARCH text.",
            "SEARCH text:",
            "```",
            _truncate(search_text, cfg.max_search_chars),
            "```",
        ]
        if attempt.ambiguity is not None:
            strategy, count = attempt.ambiguity
            parts.append(
                f"The SEARCH text is ambiguous: {count} locations matched equally well "
                f"at the {STAGE_LABELS[strategy]} stage. Include more surrounding lines "
                f"so that it identifies a single location."
            )
        if candidates:
            parts.append("Closest candidates:")
            for candidate in candidates:
                parts.append(f"- {candidate.line_range()} ({candidate.score:.0%} similar):")
                parts.extend(["```", candidate.excerpt, "```"])
        else:
            parts.append("No similar region was found in the file.")
        parts.append(
            "Re-read the file and copy the target lines exactly as they appear, "
            "with enough context to make the match unique."
        )
        return MatchResult.not_found("\n".join(parts), candidates=candidates)


def find_match(
    search_text: str,
    document: str,
    config: MatcherConfig | None = None,
) -> MatchResult:
    """Convenience function to match one snippet with a fresh matcher."""
    return FuzzyMatcher(config).find_match(search_text, document)


__all__ = [
    "FuzzyMatcher",
    "TextLine",
    "find_all",
    "find_match",
    "normalize_whitespace",
    "split_lines",
    "trimmed_search_lines",
]

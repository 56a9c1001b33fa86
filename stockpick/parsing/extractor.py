"""Tolerant section extraction from free-form AI text.

AI output is not guaranteed to follow the requested layout, so extraction
works from a table of heading patterns rather than a grammar. Two
strategies share the same rule table format:

LINE_SCAN
    Walk the text line by line with a "current section" state. A line that
    matches a heading switches the section and is dropped; any other
    non-empty line is appended to the active section. Rules with a
    ``capture`` pattern keep only the first matching fragment (the heading
    line itself is tested too) and ignore later lines.

REGION
    For each rule, take the text after the heading line up to the next line
    that contains any other rule's heading. Text after a colon on the heading
    line is kept too; ``inline`` rules use only that remainder when present.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence


class Strategy(str, Enum):
    LINE_SCAN = "line_scan"
    REGION = "region"


@dataclass(frozen=True)
class SectionRule:
    """How to find one field: its heading pattern and optional capture."""

    field: str
    heading: re.Pattern[str]
    capture: re.Pattern[str] | None = None
    inline: bool = False


def heading_pattern(
    keywords: Iterable[str] = (), anchored: Iterable[str] = ()
) -> re.Pattern[str]:
    """Build a heading regex.

    ``keywords`` match anywhere in a line. ``anchored`` alternatives must
    start the line, optionally after markdown/bullet punctuation or a
    section number; they are regex fragments matched case-insensitively.
    """
    parts = [r"\s*".join(re.escape(word) for word in k.split()) for k in keywords]
    anchored = list(anchored)
    if anchored:
        parts.append(
            r"^[\W_]*(?:\d+[.)]\s*)?(?:" + "|".join(anchored) + r")\b"
        )
    return re.compile("|".join(parts), re.IGNORECASE | re.MULTILINE)


@dataclass
class Extraction:
    """Raw result of one extraction pass."""

    sections: dict[str, list[str]] = field(default_factory=dict)
    captured: dict[str, str] = field(default_factory=dict)
    matched: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return bool(self.matched)

    def lines(self, name: str) -> list[str]:
        return self.sections.get(name, [])

    def text(self, name: str, sep: str = " ") -> str:
        """Captured value if any, else the joined section text, trimmed."""
        if name in self.captured:
            return self.captured[name].strip()
        return sep.join(self.lines(name)).strip()


class SectionExtractor:
    """Extract named sections from text using a rule table and a strategy."""

    def __init__(self, rules: Sequence[SectionRule], strategy: Strategy = Strategy.LINE_SCAN):
        self.rules = list(rules)
        self.strategy = strategy
        self._regions = self._compile_regions() if strategy is Strategy.REGION else {}

    def extract(self, text: str) -> Extraction:
        if self.strategy is Strategy.REGION:
            return self._extract_regions(text)
        return self._scan_lines(text)

    # ------------------------------------------------------------------
    # LINE_SCAN
    # ------------------------------------------------------------------

    def _match_heading(self, line: str) -> SectionRule | None:
        for rule in self.rules:
            if rule.heading.search(line):
                return rule
        return None

    def _scan_lines(self, text: str) -> Extraction:
        result = Extraction()
        current: SectionRule | None = None

        for raw_line in text.splitlines():
            line = raw_line.strip()

            rule = self._match_heading(line)
            if rule is not None:
                current = rule
                if rule.field not in result.matched:
                    result.matched.append(rule.field)
                self._try_capture(result, rule, line)
                continue

            if current is None or not line:
                continue
            if current.capture is not None:
                if self._try_capture(result, current, line):
                    continue
                if current.field in result.captured:
                    continue
            result.sections.setdefault(current.field, []).append(line)

        return result

    @staticmethod
    def _try_capture(result: Extraction, rule: SectionRule, line: str) -> bool:
        if rule.capture is None or rule.field in result.captured:
            return False
        match = rule.capture.search(line)
        if match is None:
            return False
        result.captured[rule.field] = match.group(0)
        return True

    # ------------------------------------------------------------------
    # REGION
    # ------------------------------------------------------------------

    def _compile_regions(self) -> dict[str, tuple[re.Pattern[str], re.Pattern[str] | None]]:
        compiled = {}
        for rule in self.rules:
            others = "|".join(
                f"(?:{other.heading.pattern})" for other in self.rules if other is not rule
            )
            stop = rf"(?=^[^\n]*(?:{others})|\Z)" if others else r"(?=\Z)"
            region = re.compile(
                rf"(?:{rule.heading.pattern})[^\n]*\n+([\s\S]*?){stop}",
                re.IGNORECASE | re.MULTILINE,
            )
            inline = re.compile(
                rf"(?:{rule.heading.pattern})[^\n:：]*[:：][ \t]*([^\n]*)",
                re.IGNORECASE | re.MULTILINE,
            )
            compiled[rule.field] = (region, inline)
        return compiled

    def _extract_regions(self, text: str) -> Extraction:
        result = Extraction()
        for rule in self.rules:
            heading = rule.heading.search(text)
            if heading is None:
                continue
            result.matched.append(rule.field)

            region, inline = self._regions[rule.field]
            start = heading.start()
            match = inline.match(text, start)
            same_line = match.group(1).strip() if match else ""
            if rule.inline and same_line:
                body = same_line
            else:
                match = region.match(text, start)
                rest = match.group(1).strip() if match else ""
                body = "\n".join(part for part in (same_line, rest) if part)
            if not body:
                continue

            result.sections[rule.field] = [body]
            if rule.capture is not None:
                captured = rule.capture.search(body)
                if captured:
                    result.captured[rule.field] = captured.group(0)
        return result

"""
Keyword matching for scanned log lines.
"""

from collections.abc import Iterable, Iterator

from logsentry.core import AlertEvent


class KeywordMatcher:
    """
    Tests lines for case-sensitive substring matches.

    Keywords are checked in configured order and every matching keyword
    counts, so one line can produce several alerts.
    """

    def __init__(self, keywords: Iterable[str]) -> None:
        self.keywords = tuple(keywords)

    def match(self, line: str) -> list[str]:
        """Return the keywords contained in the line, in configured order."""
        return [keyword for keyword in self.keywords if keyword in line]

    def alerts(self, line: str, path: str) -> Iterator[AlertEvent]:
        """Yield one AlertEvent per keyword found in the line."""
        for keyword in self.match(line):
            yield AlertEvent(line=line, file=path, keyword=keyword)

"""Search over the note tree: full text, tags, modification date and combinations.

There is no index; every query walks the Node Store. Results are deterministic
for an unchanged tree (ties are broken by path).
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from logging import getLogger
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Union

from ..config.settings import SearchConfig
from ..memory.node_store import NodeInfo, NodeStore
from ..utils.errors import ValidationError
from ..utils.timeutil import parse_timestamp, utcnow

logger = getLogger("KINDLING.Search")

DateLike = Union[str, datetime, None]

SORT_MODES = ("relevance", "date", "heat")

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class SearchResult:
    path: str
    relevance: float
    modified: datetime
    preview: Optional[str] = None
    matched_tags: List[str] = field(default_factory=list)
    occurrence_count: int = 0
    first_index: int = -1

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": self.path,
            "relevance": self.relevance,
            "modified": self.modified.isoformat(),
            "preview": self.preview,
            "matchedTags": self.matched_tags,
            "occurrenceCount": self.occurrence_count,
        }


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Lower-case tags with any leading '#' removed; blanks dropped."""
    return [t.strip().lstrip("#").lower() for t in tags if t and t.strip().lstrip("#")]


def has_tag(content_lower: str, tag: str) -> bool:
    return f"#{tag}" in content_lower or f"[[{tag}]]" in content_lower


class SearchEngine:
    """Stateless retrieval over a NodeStore."""

    def __init__(
        self,
        node_store: NodeStore,
        config: Optional[SearchConfig] = None,
        heat_lookup: Optional[Callable[[str], float]] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = node_store
        self.config = config or SearchConfig()
        self.heat_lookup = heat_lookup
        self.clock = clock

    def _preview(self, content: str, index: int) -> str:
        start = max(0, index - self.config.preview_before)
        return content[start:index + self.config.preview_after].replace("\n", " ") + "..."

    def _match(self, node: NodeInfo, content: str, pattern: re.Pattern,
               include_preview: bool) -> Optional[SearchResult]:
        # offsets index the original content, so previews stay aligned
        starts = [m.start() for m in pattern.finditer(content)]
        if not starts:
            return None
        first, count = starts[0], len(starts)
        return SearchResult(
            path=node.path,
            relevance=count * 10 + (100 - min(100, first)),
            modified=node.modified,
            preview=self._preview(content, first) if include_preview else None,
            occurrence_count=count,
            first_index=first,
        )

    def full_text_search(
        self,
        query: str,
        case_sensitive: Optional[bool] = None,
        max_results: Optional[int] = None,
        include_preview: bool = True,
    ) -> List[SearchResult]:
        """Substring search ranked by occurrences and how early the first hit is."""
        if not query:
            return []
        if case_sensitive is None:
            case_sensitive = self.config.case_sensitive
        limit = self.config.max_results if max_results is None else max_results
        pattern = re.compile(re.escape(query), 0 if case_sensitive else re.IGNORECASE)

        results = []
        for node in self.store.iter_nodes():
            content = self.store.read_or_none(node)
            if not content:
                continue
            hit = self._match(node, content, pattern, include_preview)
            if hit:
                results.append(hit)

        results.sort(key=lambda r: (-r.relevance, r.path))
        logger.debug(f"Full text search {query!r}: {len(results)} hits")
        return results[:limit]

    def search_by_tags(self, tags: Sequence[str]) -> List[SearchResult]:
        """Nodes carrying every requested tag as ``#tag`` or ``[[tag]]``."""
        wanted = normalize_tags(tags)
        if not wanted:
            return []

        results = []
        for node in self.store.iter_nodes():
            content = self.store.read_or_none(node)
            if not content:
                continue
            lowered = content.lower()
            if all(has_tag(lowered, tag) for tag in wanted):
                results.append(SearchResult(path=node.path, relevance=0, modified=node.modified, matched_tags=wanted))
        return results

    def search_by_date_range(self, start: DateLike, end: DateLike) -> List[SearchResult]:
        """Nodes modified within [start, end], newest first. A bare end date covers that whole day."""
        lower = parse_timestamp(start) if start is not None else EPOCH
        upper = parse_timestamp(end, end_of_day=True) if end is not None else self.clock()

        results = [
            SearchResult(path=node.path, relevance=0, modified=node.modified)
            for node in self.store.iter_nodes()
            if lower <= node.modified <= upper
        ]
        results.sort(key=lambda r: (r.modified, r.path), reverse=True)
        return results

    def advanced_search(
        self,
        query: Optional[str] = None,
        tags: Optional[Sequence[str]] = None,
        start: DateLike = None,
        end: DateLike = None,
        sort: str = "relevance",
        max_results: Optional[int] = None,
    ) -> List[SearchResult]:
        """Combine text, tag and date criteria. Absent criteria do not filter."""
        if sort not in SORT_MODES:
            raise ValidationError(f"Unknown sort mode: {sort!r}", context={"allowed": list(SORT_MODES)})
        if sort == "heat" and self.heat_lookup is None:
            raise ValidationError("Sorting by heat needs a heat lookup")

        if query:
            results = self.full_text_search(query, max_results=self.config.candidate_limit)
        else:
            results = [
                SearchResult(path=node.path, relevance=0, modified=node.modified)
                for node in self.store.iter_nodes()
            ]

        wanted = normalize_tags(tags or [])
        if wanted:
            tagged = {r.path for r in self.search_by_tags(wanted)}
            results = [r for r in results if r.path in tagged]
            for r in results:
                r.matched_tags = list(wanted)

        if start is not None or end is not None:
            lower = parse_timestamp(start) if start is not None else EPOCH
            upper = parse_timestamp(end, end_of_day=True) if end is not None else self.clock()
            results = [r for r in results if lower <= r.modified <= upper]

        if sort == "date":
            results.sort(key=lambda r: (r.modified, r.path), reverse=True)
        elif sort == "heat":
            heat = {r.path: self.heat_lookup(r.path) for r in results}
            results.sort(key=lambda r: (-heat[r.path], r.path))
        else:
            results.sort(key=lambda r: (-r.relevance, r.path))

        if max_results is not None:
            results = results[:max_results]
        return results


__all__ = ["SearchResult", "SearchEngine", "SORT_MODES", "normalize_tags"]

"""Per-item timing records."""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass
class ContentStat:
    path: str = ''
    loading_parsing_time: float = 0.0
    evaluate_time: float = 0.0
    summary_time: float = 0.0

    @property
    def total_time(self) -> float:
        return self.loading_parsing_time + self.evaluate_time + self.summary_time


class SiteStatistics:
    """Timing records keyed by content item identity."""

    def __init__(self):
        # id -> (item, stat); the item is kept so its id cannot be reused
        self._content: Dict[int, Tuple[object, ContentStat]] = {}

    def get_content_stat(self, item) -> ContentStat:
        if item is None:
            raise ValueError("item must not be None")
        entry = self._content.get(id(item))
        if entry is None:
            stat = ContentStat(path=str(getattr(item, 'path', '') or ''))
            self._content[id(item)] = (item, stat)
            return stat
        return entry[1]

    def __len__(self):
        return len(self._content)

    def __iter__(self):
        return (stat for _, stat in self._content.values())

    def total_time(self) -> float:
        return sum(stat.total_time for stat in self)

    def slowest(self, count: int = 5):
        return sorted(self, key=lambda stat: stat.total_time, reverse=True)[:count]

    def reset(self):
        self._content.clear()

"""
Leaderboard ranking for comparing several generated notes.
Composite score is the unweighted mean of the four quality metrics.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import pandas as pd

from .models import QUALITY_METRICS, MetricResult


@dataclass(frozen=True)
class LeaderboardEntry:
    """One candidate's metrics and composite score."""
    id: str
    result: MetricResult
    composite_score: float


@dataclass(frozen=True)
class Leaderboard:
    """Entries sorted best first, with the best value of each quality metric."""
    entries: Tuple[LeaderboardEntry, ...] = ()
    best: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self):
        # Read-only, like the rest of the frozen board
        object.__setattr__(self, 'best', MappingProxyType(dict(self.best)))

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    @property
    def winner(self) -> Optional[str]:
        return self.entries[0].id if self.entries else None

    def is_best_in_class(self, entry: LeaderboardEntry, metric: str) -> bool:
        """True if entry holds the top value for metric and that value is above 0."""
        best = self.best.get(metric, 0.0)
        return best > 0 and getattr(entry.result, metric) == best

    def to_records(self) -> List[Dict]:
        """Flat rows for JSON/CSV export, in rank order."""
        records = []
        for position, entry in enumerate(self.entries, start=1):
            row = {'rank': position, 'id': entry.id}
            row.update(entry.result.to_dict())
            row['composite_score'] = entry.composite_score
            row['length_flag'] = length_flag(entry.result.length_ratio)
            row['best_in'] = [m for m in QUALITY_METRICS if self.is_best_in_class(entry, m)]
            row['is_winner'] = position == 1
            records.append(row)
        return records

    def to_dataframe(self) -> pd.DataFrame:
        columns = ['rank', 'id', *QUALITY_METRICS, 'length_ratio', 'composite_score',
                   'length_flag', 'best_in', 'is_winner']
        return pd.DataFrame(self.to_records(), columns=columns)


def composite_score(result: MetricResult) -> float:
    """Mean of ROUGE-1, ROUGE-L, BLEU and semantic; length ratio is excluded."""
    return sum(getattr(result, m) for m in QUALITY_METRICS) / len(QUALITY_METRICS)


def length_flag(ratio: float, tolerance: float = 0.2) -> str:
    """Classify a length ratio as 'ok', 'short' or 'long' relative to the reference."""
    if abs(1 - ratio) < tolerance:
        return 'ok'
    return 'short' if ratio < 1 else 'long'


def _unpack(item: Union[Tuple[str, MetricResult], Mapping]) -> Tuple[str, MetricResult]:
    if isinstance(item, Mapping):
        return str(item['id']), item['result']
    entry_id, result = item
    return str(entry_id), result


def rank(entries: Iterable[Union[Tuple[str, MetricResult], Mapping]]) -> Leaderboard:
    """
    Rank candidates by composite score.

    Args:
        entries: (id, MetricResult) pairs or {'id': ..., 'result': ...} mappings

    Returns:
        Leaderboard sorted descending by composite score; ties keep input order
    """
    scored = []
    for item in entries:
        entry_id, result = _unpack(item)
        scored.append(LeaderboardEntry(entry_id, result, composite_score(result)))

    # sorted() is stable, including with reverse=True
    ordered = sorted(scored, key=lambda e: e.composite_score, reverse=True)

    best = {
        m: max((getattr(e.result, m) for e in scored), default=0.0)
        for m in QUALITY_METRICS
    }

    return Leaderboard(entries=tuple(ordered), best=best)

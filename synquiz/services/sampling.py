"""Entry selection strategies for filling a question pool."""
import random
from typing import List, Mapping, Optional, Sequence
from synquiz.constants import MIN_WEIGHT, WRONG_COUNT_WEIGHT, WRONG_RATE_WEIGHT
from synquiz.services.words import FailureStat, WordEntry


def calculate_weight(stat: Optional[FailureStat]) -> float:
    """
    Sampling weight of an entry given the player's failure record.

    Formula:
    - weight = 1 + wrong_count * 3 + wrong_rate * 5
    - wrong_rate is 0 when the entry was never attempted
    - floored at MIN_WEIGHT so every entry stays reachable

    Args:
        stat: FailureStat for the entry, or None if the player never saw it

    Returns:
        Weight >= MIN_WEIGHT
    """
    if stat is None:
        return MIN_WEIGHT

    weight = 1 + stat.wrong_count * WRONG_COUNT_WEIGHT + stat.wrong_rate * WRONG_RATE_WEIGHT
    return max(MIN_WEIGHT, weight)


class UniformCycleSampler:
    """Repeat the vocabulary until it covers the pool, then shuffle and cut.

    Every entry appears before any entry appears twice when the vocabulary is
    at least as large as the pool.
    """
    name = "uniform"

    def fill_pool(self, pool: Sequence[WordEntry], needed: int, rng=None) -> List[WordEntry]:
        rng = rng or random
        entries = list(pool)
        while len(entries) < needed:
            entries.extend(pool)
        rng.shuffle(entries)
        return entries[:needed]


class FailureWeightedSampler:
    """Roulette-wheel draws with replacement, biased toward missed entries."""
    name = "weighted"

    def __init__(self, stats: Optional[Mapping[str, FailureStat]] = None):
        self.stats = dict(stats or {})

    def draw_one(self, pool: Sequence[WordEntry], rng=None) -> WordEntry:
        """
        Draw a single entry.

        Uniform when no stats are known. Otherwise a cumulative-weight
        roulette walks the pool in order, subtracting each weight from
        r = uniform(0, total) until r <= 0.

        Args:
            pool: Non-empty sequence of entries
            rng: Random source (default: module-level random)

        Returns:
            Selected WordEntry
        """
        if not pool:
            raise ValueError("Cannot draw from an empty pool")

        rng = rng or random
        if not self.stats:
            return rng.choice(pool)

        weights = [calculate_weight(self.stats.get(entry.id)) for entry in pool]
        remaining = rng.uniform(0, sum(weights))
        for entry, weight in zip(pool, weights):
            remaining -= weight
            if remaining <= 0:
                return entry

        # Float rounding can leave a sliver past the last entry
        return pool[-1]

    def fill_pool(self, pool: Sequence[WordEntry], needed: int, rng=None) -> List[WordEntry]:
        return [self.draw_one(pool, rng) for _ in range(needed)]


def choose_sampler(stats: Optional[Mapping[str, FailureStat]] = None):
    """Weighted sampler when the player has failure stats, uniform cycle otherwise."""
    if stats:
        return FailureWeightedSampler(stats)
    return UniformCycleSampler()

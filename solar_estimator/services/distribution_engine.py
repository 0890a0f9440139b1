"""
Structure distribution — partitions a project's panels into structures.

Two strategies:
  GREEDY_UNIFORM  fill every structure to rod capacity, remainder in one extra
                  structure (6 → 2×3, 5 → 1×3 + 1×2, 4 → 1×3 + 1×1).
  BALANCED        dynamic programme preferring square-ish structures (row
                  length close to panel width) while charging a fixed cost per
                  structure, so 4 panels may become 2×2 instead of 1×4.
"""
import logging
import math
from dataclasses import dataclass
from typing import Dict, List

from solar_estimator import config
from solar_estimator.exceptions import InfeasibleLayoutError, InvalidDimensionError
from solar_estimator.models.schemas import DistributionStrategy
from solar_estimator.services.geometry_engine import structure_footprint_len
from solar_estimator.services.perf_monitor import timed

logger = logging.getLogger("solar.distribution")


@dataclass(frozen=True)
class StructureGroup:
    panels_per_structure: int
    count: int

    @property
    def panels(self) -> int:
        return self.panels_per_structure * self.count


def _check_counts(total_panels: int, max_per_rod: int) -> int:
    if isinstance(total_panels, bool) or int(total_panels) != total_panels or total_panels < 0:
        raise InvalidDimensionError(
            "total_panels", total_panels, f"total_panels must be a non-negative integer (got {total_panels!r})"
        )
    if max_per_rod <= 0:
        raise InfeasibleLayoutError("No panel fits on a rod (max panels per rod is 0).")
    return int(total_panels)


def compress_sizes(sizes: List[int]) -> List[StructureGroup]:
    """Collapse structure sizes into groups, largest first."""
    counts: Dict[int, int] = {}
    for k in sorted(sizes, reverse=True):
        counts[k] = counts.get(k, 0) + 1
    return [StructureGroup(panels_per_structure=k, count=c) for k, c in counts.items()]


def distribute_greedy(total_panels: int, max_per_rod: int) -> List[StructureGroup]:
    total = _check_counts(total_panels, max_per_rod)
    full_groups, remainder = divmod(total, max_per_rod)

    groups = []
    if full_groups:
        groups.append(StructureGroup(panels_per_structure=max_per_rod, count=full_groups))
    if remainder:
        groups.append(StructureGroup(panels_per_structure=remainder, count=1))
    return groups


def aspect_penalty(k: int, panel_len: float, panel_wid: float, gap: float = config.GAP) -> float:
    """|ln(row length / panel width)| — zero when the structure is square-ish."""
    length = structure_footprint_len(k, panel_len, gap)
    width = max(config.MIN_PANEL_WIDTH, panel_wid)
    return abs(math.log(length / width))


@timed
def distribute_balanced(
    total_panels: int,
    max_per_rod: int,
    panel_len: float,
    panel_wid: float,
    gap: float = config.GAP,
    structure_penalty: float = config.STRUCTURE_PENALTY,
) -> List[StructureGroup]:
    """
    Minimise Σ(aspect_penalty(k) + structure_penalty) over all partitions of
    ``total_panels`` into parts of size 1..max_per_rod.

    dp[n] = min over k of dp[n−k] + aspect_penalty(k) + structure_penalty.
    Ties keep the smaller k (first found), so results are reproducible.
    """
    total = _check_counts(total_panels, max_per_rod)
    if total == 0:
        return []

    # no structure can hold more panels than the project has
    largest = min(max_per_rod, total)
    part_cost = [0.0] + [
        aspect_penalty(k, panel_len, panel_wid, gap) + structure_penalty
        for k in range(1, largest + 1)
    ]

    dp = [math.inf] * (total + 1)
    pick = [0] * (total + 1)
    dp[0] = 0.0
    for n in range(1, total + 1):
        for k in range(1, min(largest, n) + 1):
            score = dp[n - k] + part_cost[k]
            if score < dp[n]:
                dp[n] = score
                pick[n] = k

    sizes = []
    n = total
    while n > 0:
        k = pick[n]
        sizes.append(k)
        n -= k

    groups = compress_sizes(sizes)
    logger.debug("balanced distribution total=%d max=%d score=%.4f groups=%s", total, max_per_rod, dp[total], groups)
    return groups


def distribute(
    total_panels: int,
    max_per_rod: int,
    strategy: DistributionStrategy = DistributionStrategy.GREEDY_UNIFORM,
    panel_len: float = 0.0,
    panel_wid: float = 0.0,
    gap: float = config.GAP,
    structure_penalty: float = config.STRUCTURE_PENALTY,
) -> List[StructureGroup]:
    """Dispatch to the selected strategy. BALANCED needs the panel axes."""
    if DistributionStrategy(strategy) is DistributionStrategy.BALANCED:
        if panel_len <= 0:
            raise InvalidDimensionError("panel_len", panel_len)
        return distribute_balanced(total_panels, max_per_rod, panel_len, panel_wid, gap, structure_penalty)
    return distribute_greedy(total_panels, max_per_rod)

"""
Cutting plan engine — packs front legs, rear legs and sloped rods into
164" GI rods.

Default strategy is First-Fit-Decreasing: sort pieces longest first, place
each in the first open rod with room (a kerf is lost before every cut after
the first), otherwise open a new rod. FFD is deterministic for identical
inputs and within 11/9 of the optimal rod count.

The EXACT strategy solves the same bin-packing with OR-Tools CP-SAT under a
time limit and keeps the FFD plan whenever the solver does not beat it.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ortools.sat.python import cp_model

from solar_estimator import config
from solar_estimator.exceptions import InfeasibleLayoutError, InvalidDimensionError
from solar_estimator.models.schemas import CuttingStrategy
from solar_estimator.services.geometry_engine import require_non_negative, require_positive
from solar_estimator.services.perf_monitor import timed
from solar_estimator.services.rod_engine import StructureBreakdown

logger = logging.getLogger("solar.cutting")

PIECE_FRONT = "Front"
PIECE_REAR = "Rear"
PIECE_HYPO = "Hypo"
PIECE_TYPES = (PIECE_FRONT, PIECE_REAR, PIECE_HYPO)


@dataclass(frozen=True)
class CutPiece:
    type: str
    length: float


@dataclass
class RodPlan:
    cuts: List[CutPiece] = field(default_factory=list)
    used_length: float = 0.0
    waste: float = 0.0


@dataclass(frozen=True)
class CutPattern:
    pattern: str
    count: int
    example_waste: float


@dataclass
class CuttingPlan:
    pieces: List[CutPiece] = field(default_factory=list)
    rods: List[RodPlan] = field(default_factory=list)
    patterns: List[CutPattern] = field(default_factory=list)
    total_waste: float = 0.0
    # Pieces longer than one rod; they need joining or longer stock
    oversize_pieces: List[CutPiece] = field(default_factory=list)
    strategy: CuttingStrategy = CuttingStrategy.FFD

    @property
    def rods_count(self) -> int:
        return len(self.rods)


def pieces_from_breakdown(breakdown: List[StructureBreakdown]) -> List[CutPiece]:
    """Expand every structure group into individual cut pieces."""
    pieces: List[CutPiece] = []
    for b in breakdown:
        pieces.extend(CutPiece(PIECE_FRONT, b.legs.front_leg_height) for _ in range(b.front_legs_count))
        pieces.extend(CutPiece(PIECE_REAR, b.legs.rear_leg_height) for _ in range(b.rear_legs_count))
        pieces.extend(CutPiece(PIECE_HYPO, b.legs.hypotenuse_rod_length) for _ in range(b.hypo_rods_count))
    return pieces


def _finish_rod(cuts: List[CutPiece], used: float, rod_length: float) -> RodPlan:
    return RodPlan(cuts=cuts, used_length=used, waste=round(rod_length - used, 2))


@timed
def plan_cuts(
    pieces: List[CutPiece],
    rod_length: float = config.ROD_LENGTH,
    kerf: float = config.KERF,
) -> List[RodPlan]:
    """First-fit-decreasing bin packing with kerf loss between consecutive cuts."""
    rod_length = require_positive("rod_length", rod_length)
    kerf = require_non_negative("kerf", kerf)

    for piece in pieces:
        require_positive("piece length", piece.length)
        if piece.length > rod_length + config.FLOAT_TOLERANCE:
            raise InfeasibleLayoutError(
                f'{piece.type} piece of {piece.length:.2f}" is longer than the {rod_length:g}" rod.'
            )

    # sorted() is stable: equal lengths keep their input order
    ordered = sorted(pieces, key=lambda p: -p.length)
    rods_cuts: List[List[CutPiece]] = []
    rods_used: List[float] = []

    for piece in ordered:
        for i, cuts in enumerate(rods_cuts):
            needed = piece.length + (kerf if cuts else 0.0)
            if rods_used[i] + needed <= rod_length + config.FLOAT_TOLERANCE:
                cuts.append(piece)
                rods_used[i] += needed
                break
        else:
            rods_cuts.append([piece])
            rods_used.append(piece.length)

    return [_finish_rod(cuts, used, rod_length) for cuts, used in zip(rods_cuts, rods_used)]


def _pattern_signature(rod: RodPlan) -> str:
    cuts = sorted(rod.cuts, key=lambda c: -c.length)
    return " | ".join(f"{c.type}:{c.length:.2f}" for c in cuts)


def summarize_patterns(rods: List[RodPlan]) -> List[CutPattern]:
    """Group rods with identical cut lists, most frequent pattern first."""
    counts: Dict[str, int] = {}
    example_waste: Dict[str, float] = {}
    for rod in rods:
        sig = _pattern_signature(rod)
        counts[sig] = counts.get(sig, 0) + 1
        example_waste.setdefault(sig, rod.waste)

    patterns = [CutPattern(pattern=sig, count=n, example_waste=example_waste[sig]) for sig, n in counts.items()]
    return sorted(patterns, key=lambda p: -p.count)


def _solve_exact(
    pieces: List[CutPiece],
    rod_length: float,
    kerf: float,
    max_rods: int,
    time_limit_s: float,
) -> Optional[List[RodPlan]]:
    """
    CP-SAT model: x[i, j] = piece i cut from rod j, y[j] = rod j purchased.

    n pieces on one rod use Σlen + (n−1)·kerf, i.e. Σ(len + kerf) ≤ rod + kerf,
    so every piece is sized len + kerf against a capacity of rod + kerf.
    Returns None when the solver finds nothing better than ``max_rods``.
    """
    scale = config.CP_SAT_LENGTH_SCALE
    sizes = [round((p.length + kerf) * scale) for p in pieces]
    capacity = int((rod_length + kerf) * scale + config.FLOAT_TOLERANCE)
    num_items, num_bins = len(pieces), max_rods

    model = cp_model.CpModel()
    x = {(i, j): model.NewBoolVar(f"x_{i}_{j}") for i in range(num_items) for j in range(num_bins)}
    y = [model.NewBoolVar(f"y_{j}") for j in range(num_bins)]
    for i in range(num_items):
        model.AddExactlyOne([x[i, j] for j in range(num_bins)])
    for j in range(num_bins):
        model.Add(sum(x[i, j] * sizes[i] for i in range(num_items)) <= capacity * y[j])
    # Purchased rods are the leading ones
    for j in range(num_bins - 1):
        model.Add(y[j] >= y[j + 1])
    model.Add(sum(y) <= max_rods - 1)
    model.Minimize(sum(y))

    solver = cp_model.CpSolver()
    solver.parameters.max_time_in_seconds = time_limit_s
    solver.parameters.num_workers = 1
    status = solver.Solve(model)
    if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
        return None

    plans = []
    for j in range(num_bins):
        if not solver.Value(y[j]):
            continue
        cuts = sorted((pieces[i] for i in range(num_items) if solver.Value(x[i, j])), key=lambda p: -p.length)
        if not cuts:
            continue
        used = sum(c.length for c in cuts) + kerf * (len(cuts) - 1)
        if used > rod_length + config.FLOAT_TOLERANCE:
            # integer scaling admitted a rod that overflows in inches
            return None
        plans.append(_finish_rod(cuts, used, rod_length))
    return plans


class CuttingPlanEngine:
    """Builds the cutting plan for a project's pieces."""

    def __init__(
        self,
        rod_length: float = config.ROD_LENGTH,
        kerf: float = config.KERF,
        strategy: CuttingStrategy = CuttingStrategy.FFD,
        time_limit_s: float = config.CP_SAT_TIME_LIMIT_S,
    ) -> None:
        self.rod_length = require_positive("rod_length", rod_length)
        self.kerf = require_non_negative("kerf", kerf)
        self.strategy = CuttingStrategy(strategy)
        self.time_limit_s = time_limit_s

    def build_plan(self, pieces: List[CutPiece]) -> CuttingPlan:
        """
        Pack ``pieces`` into rods. Pieces longer than a rod are reported in
        ``oversize_pieces`` rather than packed.
        """
        if not pieces:
            return CuttingPlan(strategy=self.strategy)

        fitting, oversize = [], []
        for p in pieces:
            if p.length <= 0:
                raise InvalidDimensionError("piece length", p.length)
            (fitting if p.length <= self.rod_length + config.FLOAT_TOLERANCE else oversize).append(p)
        if oversize:
            logger.warning(
                "%d piece(s) longer than the %g\" rod were left out of the plan (longest %.2f\")",
                len(oversize), self.rod_length, max(p.length for p in oversize),
            )

        rods = plan_cuts(fitting, self.rod_length, self.kerf)
        strategy_used = CuttingStrategy.FFD
        if self.strategy is CuttingStrategy.EXACT and len(rods) > 1:
            exact = _solve_exact(fitting, self.rod_length, self.kerf, len(rods), self.time_limit_s)
            if exact is None:
                logger.info("exact cutting found no improvement over FFD (%d rods)", len(rods))
            else:
                logger.info("exact cutting reduced rods from %d to %d", len(rods), len(exact))
                rods = exact
                strategy_used = CuttingStrategy.EXACT

        total_waste = round(sum(r.waste for r in rods), 2)
        logger.debug("cutting plan pieces=%d rods=%d waste=%.2f", len(pieces), len(rods), total_waste)
        return CuttingPlan(
            pieces=list(pieces),
            rods=rods,
            patterns=summarize_patterns(rods),
            total_waste=total_waste,
            oversize_pieces=oversize,
            strategy=strategy_used,
        )

    def build_plan_for_breakdown(self, breakdown: List[StructureBreakdown]) -> CuttingPlan:
        return self.build_plan(pieces_from_breakdown(breakdown))

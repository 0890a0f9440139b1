"""
Inventory reconciliation — reuse leftover cut pieces before cutting new rods.

Workshop inventory is a list of UsablePiece records (length × quantity). For
each required length, pieces within ``tolerance`` inches are consumed,
closest length first. The caller's records are never mutated: the result
carries the remaining inventory for the caller to persist.
"""
import logging
import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from solar_estimator import config
from solar_estimator.models.schemas import RequiredPiece, UsablePiece
from solar_estimator.services.cutting_plan_engine import CutPiece
from solar_estimator.services.geometry_engine import require_non_negative
from solar_estimator.services.perf_monitor import timed

logger = logging.getLogger("solar.inventory")

PieceLike = Union[UsablePiece, Dict[str, Any]]
RequiredLike = Union[RequiredPiece, Dict[str, Any]]


@dataclass(frozen=True)
class UsedPiece:
    length: float         # requested length
    quantity: int
    from_length: float    # actual length of the inventory piece
    piece_id: str


@dataclass
class ReconcileResult:
    remaining_required: List[RequiredPiece] = field(default_factory=list)
    remaining_inventory: List[UsablePiece] = field(default_factory=list)
    used: List[UsedPiece] = field(default_factory=list)

    @property
    def fully_satisfied(self) -> bool:
        return not self.remaining_required


def normalize_piece(record: Dict[str, Any]) -> Optional[UsablePiece]:
    """
    Coerce a stored inventory row into a UsablePiece.

    Missing ids are generated, quantity is clamped to ≥ 0 and the note is
    stripped. Rows with a missing, non-numeric or non-positive length or
    quantity yield None.
    """
    try:
        length = float(record.get("length") or record.get("len") or 0)
        # "2.5" → 2, as the browser store's parseInt does
        quantity = max(0, int(float(record.get("quantity") or record.get("qty") or 0)))
    except (TypeError, ValueError, OverflowError):
        return None
    if not math.isfinite(length) or length <= 0 or quantity <= 0:
        return None

    data = {
        "id": str(record.get("id") or uuid.uuid4()),
        "length": length,
        "quantity": quantity,
        "note": str(record.get("note") or "").strip(),
    }
    created_at = record.get("created_at") or record.get("createdAt")
    if isinstance(created_at, (int, float)):
        # epoch milliseconds from the browser store
        data["created_at"] = datetime.fromtimestamp(created_at / 1000.0, tz=timezone.utc)
    elif created_at:
        data["created_at"] = created_at
    return UsablePiece(**data)


def load_pieces(records: List[Dict[str, Any]]) -> List[UsablePiece]:
    pieces = []
    for record in records:
        piece = normalize_piece(record)
        if piece is None:
            logger.debug("dropping empty inventory row %r", record.get("id"))
            continue
        pieces.append(piece)
    return pieces


def _as_usable(piece: PieceLike) -> UsablePiece:
    return piece if isinstance(piece, UsablePiece) else UsablePiece.model_validate(piece)


def _as_required(req: RequiredLike) -> RequiredPiece:
    return req if isinstance(req, RequiredPiece) else RequiredPiece.model_validate(req)


def required_from_cut_pieces(pieces: List[CutPiece], decimals: int = 2) -> List[RequiredPiece]:
    """Group cut pieces by length into requirements, longest first."""
    counts: Dict[float, int] = {}
    for p in pieces:
        key = round(p.length, decimals)
        counts[key] = counts.get(key, 0) + 1
    return [RequiredPiece(length=length, quantity=qty) for length, qty in sorted(counts.items(), reverse=True)]


@timed
def consume(
    required: List[RequiredLike],
    inventory: List[PieceLike],
    tolerance: float = config.INVENTORY_TOLERANCE,
) -> ReconcileResult:
    """
    Satisfy ``required`` from ``inventory`` where lengths differ by at most
    ``tolerance``. Closest matches are consumed first; ties keep inventory
    order. Unmatched quantity stays in ``remaining_required``.
    """
    tolerance = require_non_negative("tolerance", tolerance)

    inv = [_as_usable(p).model_copy() for p in inventory]
    needs = [_as_required(r) for r in required]
    remaining_qty = [r.quantity for r in needs]
    used: List[UsedPiece] = []

    for idx, req in enumerate(needs):
        if remaining_qty[idx] <= 0:
            continue

        candidates = sorted(
            (
                (abs(p.length - req.length), pos)
                for pos, p in enumerate(inv)
                if p.quantity > 0 and abs(p.length - req.length) <= tolerance
            ),
            key=lambda c: c[0],
        )
        for _diff, pos in candidates:
            if remaining_qty[idx] <= 0:
                break
            piece = inv[pos]
            take = min(remaining_qty[idx], piece.quantity)
            inv[pos] = piece.model_copy(update={"quantity": piece.quantity - take})
            remaining_qty[idx] -= take
            used.append(UsedPiece(length=req.length, quantity=take, from_length=piece.length, piece_id=piece.id))

    result = ReconcileResult(
        remaining_required=[
            RequiredPiece(length=r.length, quantity=q) for r, q in zip(needs, remaining_qty) if q > 0
        ],
        remaining_inventory=[p for p in inv if p.quantity > 0],
        used=used,
    )
    if result.remaining_required:
        logger.info(
            "inventory shortfall: %d length(s) still required after reuse",
            len(result.remaining_required),
        )
    return result


def reconcile_cut_pieces(
    pieces: List[CutPiece],
    inventory: List[PieceLike],
    tolerance: float = config.INVENTORY_TOLERANCE,
) -> Tuple[List[CutPiece], ReconcileResult]:
    """
    Remove pieces that inventory can supply and return the ones still to be
    cut from new rods, together with the reconciliation record.
    """
    result = consume(required_from_cut_pieces(pieces), inventory, tolerance)
    supplied: Dict[float, int] = {}
    for u in result.used:
        supplied[u.length] = supplied.get(u.length, 0) + u.quantity

    to_cut = []
    for p in pieces:
        key = round(p.length, 2)
        if supplied.get(key, 0) > 0:
            supplied[key] -= 1
            continue
        to_cut.append(p)
    return to_cut, result

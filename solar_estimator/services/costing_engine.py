"""
CostingEngine — material, hardware and charges rollup for one estimate.

Covers:
  - GI rod material priced per inch used (rod price / rod length)
  - Per-structure hardware: base plates, anchor bolts, angle fitters, bolts
  - Per-panel hardware: U-clamps
  - Wastage percentage on the material + hardware subtotal
  - Fixed fabrication and installation charges

Hardware multipliers are fixed per structure (see config.HARDWARE_PER_STRUCTURE);
only U-clamps scale with panel count.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from solar_estimator import config
from solar_estimator.models.schemas import PriceConfig
from solar_estimator.services.distribution_engine import StructureGroup
from solar_estimator.services.rod_engine import RodTotals

logger = logging.getLogger("solar.costing")


@dataclass(frozen=True)
class HardwareQuantities:
    structures: int = 0
    panels: int = 0
    base_plates: int = 0
    anchor_bolts: int = 0
    angle_fitters: int = 0
    normal_bolts: int = 0
    u_clamps: int = 0


@dataclass(frozen=True)
class UnitPrices:
    rod_per_inch: float
    base_plate: float
    anchor_bolt: float
    angle_fitter: float
    normal_bolt: float
    u_clamp: float
    fabrication: float
    installation: float
    wastage_pct: float


@dataclass(frozen=True)
class LineItems:
    rods_by_inches: float = 0.0
    base_plates: float = 0.0
    anchor_bolts: float = 0.0
    angle_fitters: float = 0.0
    normal_bolts: float = 0.0
    u_clamps: float = 0.0

    def total(self) -> float:
        return (
            self.rods_by_inches
            + self.base_plates
            + self.anchor_bolts
            + self.angle_fitters
            + self.normal_bolts
            + self.u_clamps
        )


@dataclass(frozen=True)
class CostBreakdown:
    inches_used: float
    quantities: HardwareQuantities
    prices: UnitPrices
    items: LineItems
    subtotal: float
    wastage: float
    total: float


def hardware_quantities(
    structures: List[StructureGroup],
    u_clamps_per_panel: int = config.U_CLAMPS_PER_PANEL,
) -> HardwareQuantities:
    """Hardware counts for a structure distribution (no prices involved)."""
    n_structures = sum(s.count for s in structures)
    n_panels = sum(s.count * s.panels_per_structure for s in structures)
    per = config.HARDWARE_PER_STRUCTURE
    return HardwareQuantities(
        structures=n_structures,
        panels=n_panels,
        base_plates=n_structures * per["base_plates"],
        anchor_bolts=n_structures * per["anchor_bolts"],
        angle_fitters=n_structures * per["angle_fitters"],
        normal_bolts=n_structures * per["normal_bolts"],
        u_clamps=n_panels * u_clamps_per_panel,
    )


class CostingEngine:
    """
    Stateless costing for solar mounting structures.

    All monetary values are in the currency of the supplied PriceConfig.
    """

    def __init__(self, prices: Optional[PriceConfig] = None, rod_length: float = config.ROD_LENGTH) -> None:
        self.prices: PriceConfig = prices or PriceConfig()
        self.rod_length: float = rod_length

    def unit_prices(self) -> UnitPrices:
        p = self.prices
        return UnitPrices(
            rod_per_inch=p.rod_price_per_rod / self.rod_length,
            base_plate=p.base_plate_price,
            anchor_bolt=p.anchor_bolt_price,
            angle_fitter=p.angle_fitter_price,
            normal_bolt=p.normal_bolt_price,
            u_clamp=p.u_clamp_price,
            fabrication=p.fabrication_charge,
            installation=p.installation_charge,
            wastage_pct=p.wastage_percent,
        )

    def compute_cost(
        self,
        rod_totals: Optional[RodTotals],
        structures: Optional[List[StructureGroup]],
    ) -> Optional[CostBreakdown]:
        """
        Cost rollup. Returns None while no calculation has been made
        (either input missing).

            subtotal = Σ line items
            wastage  = subtotal × wastage% / 100
            total    = subtotal + wastage + fabrication + installation
        """
        if rod_totals is None or structures is None:
            return None

        qty = hardware_quantities(structures, self.prices.u_clamps_per_panel)
        price = self.unit_prices()
        inches_used = rod_totals.total_inches_required

        items = LineItems(
            rods_by_inches=inches_used * price.rod_per_inch,
            base_plates=qty.base_plates * price.base_plate,
            anchor_bolts=qty.anchor_bolts * price.anchor_bolt,
            angle_fitters=qty.angle_fitters * price.angle_fitter,
            normal_bolts=qty.normal_bolts * price.normal_bolt,
            u_clamps=qty.u_clamps * price.u_clamp,
        )
        subtotal = items.total()
        wastage = subtotal * price.wastage_pct / 100.0
        total = subtotal + wastage + price.fabrication + price.installation

        logger.debug("cost subtotal=%.2f wastage=%.2f total=%.2f", subtotal, wastage, total)
        return CostBreakdown(
            inches_used=inches_used,
            quantities=qty,
            prices=price,
            items=items,
            subtotal=subtotal,
            wastage=wastage,
            total=total,
        )

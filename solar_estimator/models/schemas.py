"""
Boundary schemas for the Solar Structure Estimator.

Plain records coming from the panel registry, the calculation form and the
inventory store are validated here before they reach any engine. Lengths are
in inches throughout.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from solar_estimator import config


class Orientation(str, Enum):
    VERTICAL = "vertical"       # long side runs along the rod
    HORIZONTAL = "horizontal"   # short side runs along the rod


class DistributionStrategy(str, Enum):
    GREEDY_UNIFORM = "greedy_uniform"
    BALANCED = "balanced"


class LegVariant(str, Enum):
    FULL_SPAN = "full_span"                 # rise = span × sin(tilt)
    SUPPORT_FRACTION = "support_fraction"   # rise = span × 2/3 × sin(tilt)


class FootprintVariant(str, Enum):
    FULL = "full"
    LEG_TO_LEG = "leg_to_leg"


class CuttingStrategy(str, Enum):
    FFD = "ffd"
    EXACT = "exact"


class PanelModel(BaseModel):
    """Panel record as stored by the panel registry."""
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    id: str = Field(..., description="Registry identifier")
    name: str = Field(..., min_length=1, description="e.g., 540W")
    width: float = Field(..., gt=0, description="Panel width in inches")
    height: float = Field(..., gt=0, description="Panel height in inches")
    description: str = Field("", description="Free text")

    @classmethod
    def from_record(cls, record: dict) -> "PanelModel":
        """Build from a loosely-typed registry row (strings, missing keys)."""
        return cls(
            id=str(record.get("id") or ""),
            name=str(record.get("name") or "").strip(),
            width=float(record.get("width") or 0),
            height=float(record.get("height") or 0),
            description=str(record.get("description") or "").strip(),
        )

    @property
    def long_side(self) -> float:
        return max(self.width, self.height)

    @property
    def short_side(self) -> float:
        return min(self.width, self.height)


def default_panels() -> List[PanelModel]:
    """Seed catalog for an empty panel registry."""
    return [PanelModel.from_record(record) for record in config.DEFAULT_PANELS]


class CalculationInputs(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    front_leg_height: float = Field(..., gt=0, description="Front leg height in inches")
    number_of_panels: int = Field(..., ge=0, description="Total panels in the project")
    orientation: Orientation = Field(Orientation.HORIZONTAL)


class PriceConfig(BaseModel):
    """Unit prices and fixed charges. Defaults mirror the estimation form."""
    model_config = ConfigDict(allow_inf_nan=False)

    rod_price_per_rod: float = Field(config.DEFAULT_PRICES["rod_price_per_rod"], ge=0)
    base_plate_price: float = Field(config.DEFAULT_PRICES["base_plate_price"], ge=0)
    anchor_bolt_price: float = Field(config.DEFAULT_PRICES["anchor_bolt_price"], ge=0)
    angle_fitter_price: float = Field(config.DEFAULT_PRICES["angle_fitter_price"], ge=0)
    normal_bolt_price: float = Field(config.DEFAULT_PRICES["normal_bolt_price"], ge=0)
    u_clamp_price: float = Field(config.DEFAULT_PRICES["u_clamp_price"], ge=0)
    u_clamps_per_panel: int = Field(config.U_CLAMPS_PER_PANEL, ge=0)
    fabrication_charge: float = Field(config.DEFAULT_PRICES["fabrication_charge"], ge=0)
    installation_charge: float = Field(config.DEFAULT_PRICES["installation_charge"], ge=0)
    wastage_percent: float = Field(config.DEFAULT_PRICES["wastage_percent"], ge=0)


class RoofDimensions(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    length: float = Field(..., gt=0, description="Roof run along the structure rows (inches)")
    width: float = Field(..., gt=0, description="Roof depth front-to-back (inches)")


class EstimateRequest(BaseModel):
    """Fully-specified input for one estimate."""
    model_config = ConfigDict(allow_inf_nan=False)

    panel: PanelModel
    inputs: CalculationInputs
    tilt_angle_deg: float = Field(config.TILT_ANGLE, ge=0, lt=90)
    rod_length: float = Field(config.ROD_LENGTH, gt=0)
    gap: float = Field(config.GAP, ge=0)
    kerf: float = Field(config.KERF, ge=0)
    prices: Optional[PriceConfig] = Field(default_factory=PriceConfig)
    roof: Optional[RoofDimensions] = None

    distribution: DistributionStrategy = DistributionStrategy.BALANCED
    leg_variant: LegVariant = LegVariant.FULL_SPAN
    footprint_variant: FootprintVariant = FootprintVariant.LEG_TO_LEG
    cutting: CuttingStrategy = CuttingStrategy.FFD


class UsablePiece(BaseModel):
    """A leftover cut piece kept in the workshop inventory."""
    model_config = ConfigDict(allow_inf_nan=False)

    id: str
    length: float = Field(..., gt=0)
    quantity: int = Field(..., ge=0)
    note: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class RequiredPiece(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    length: float = Field(..., gt=0)
    quantity: int = Field(..., ge=0)

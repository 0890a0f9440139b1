"""
Estimator configuration — single source of truth for rod stock geometry,
hardware multipliers, default prices and logging setup.

Import from here in all engines rather than hardcoding values.
"""
from __future__ import annotations

import os

from dotenv import load_dotenv

# ── Rod stock & structure geometry (inches) ───────────────────────────────────
ROD_LENGTH: float = 164.0       # GI rod as purchased
GAP: float = 5.0                # inter-panel gap along the rod
TILT_ANGLE: float = 19.0        # degrees from horizontal
KERF: float = 0.125             # saw blade width, lost per cut

# Legs and sloped rods per structure (independent of panel count)
FRONT_LEGS_PER_STRUCTURE: int = 2
REAR_LEGS_PER_STRUCTURE: int = 2
HYPO_RODS_PER_STRUCTURE: int = 2

# Rear-leg rise uses 2/3 of the sloped span in the support-fraction variant
SUPPORT_FRACTION: float = 2.0 / 3.0

# Leg-to-leg footprint drops 1/6 of the panel on each side
FOOTPRINT_SHRINK: float = 2.0 / 3.0


# ── Balanced distribution tuning ──────────────────────────────────────────────
# Lower => more splitting (more structures). Higher => fewer, longer structures.
STRUCTURE_PENALTY: float = 0.35
MIN_PANEL_WIDTH: float = 1e-6


# ── Numeric tolerances ────────────────────────────────────────────────────────
FLOAT_TOLERANCE: float = 1e-9
INVENTORY_TOLERANCE: float = 0.25   # inches, reuse match window


# ── Hardware ──────────────────────────────────────────────────────────────────
HARDWARE_PER_STRUCTURE: dict[str, int] = {
    "base_plates": 4,
    "anchor_bolts": 16,
    "angle_fitters": 4,
    "normal_bolts": 24,
}
U_CLAMPS_PER_PANEL: int = 4


# ── Default unit prices (INR) ─────────────────────────────────────────────────
DEFAULT_PRICES: dict[str, float] = {
    "rod_price_per_rod": 1000.0,
    "base_plate_price": 150.0,
    "anchor_bolt_price": 20.0,
    "angle_fitter_price": 150.0,
    "normal_bolt_price": 15.0,
    "u_clamp_price": 0.0,
    "fabrication_charge": 1500.0,
    "installation_charge": 0.0,
    "wastage_percent": 15.0,
}


# ── Panel catalog seed ────────────────────────────────────────────────────────
DEFAULT_PANELS: list[dict] = [
    {"id": "p1", "name": "540W", "width": 89.0, "height": 45.0, "description": "Default 540W panel"},
    {"id": "p2", "name": "550W", "width": 90.0, "height": 45.0, "description": "Default 550W panel"},
]


# ── Exact cutting solver ──────────────────────────────────────────────────────
CP_SAT_TIME_LIMIT_S: float = 10.0
# Lengths are scaled to integers for CP-SAT (1/1000 inch resolution)
CP_SAT_LENGTH_SCALE: int = 1000


# ── Logging ───────────────────────────────────────────────────────────────────
LOG_LEVEL_ENV: str = "SOLAR_LOG_LEVEL"
LOG_FORMAT_ENV: str = "SOLAR_LOG_FORMAT"


def configure_from_env() -> None:
    """Load ``.env`` (if present) and configure logging from the environment."""
    from solar_estimator.services.logging_config import setup_logging

    load_dotenv()
    level = os.getenv(LOG_LEVEL_ENV, "INFO")
    json_output = os.getenv(LOG_FORMAT_ENV, "json").lower() != "text"
    setup_logging(level=level, json_output=json_output)

"""
Environment Model for the Image-Method Channel
---------------------------------------------
Isovelocity water column between the sea surface and a single seabed layer,
plus the stopping conditions that bound the image search.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

__all__ = [
    "Boundary",
    "SeafloorType",
    "Environment",
    "StoppingConditions",
    "InvalidStoppingConditions",
]

logger = logging.getLogger(__name__)


class Boundary(Enum):
    """Reflecting boundaries of the water column. Values are breadcrumb codes."""
    SURFACE = "s"
    BOTTOM = "b"

    @property
    def other(self) -> "Boundary":
        # a bounce off one boundary is always followed by the other
        return Boundary.BOTTOM if self is Boundary.SURFACE else Boundary.SURFACE


class SeafloorType:
    """Seabed sound speed (m/s) and density (g/cm^3) for common sediments.

    Values after Jensen, Kuperman, Porter & Schmidt, Computational Ocean
    Acoustics, Table 1.3.
    """
    CLAY = (1500.0, 1.5)
    SILT = (1575.0, 1.7)
    SAND = (1650.0, 1.9)
    GRAVEL = (1800.0, 2.0)
    MORAINE = (1950.0, 2.1)
    CHALK = (2400.0, 2.2)
    LIMESTONE = (3000.0, 2.4)
    BASALT = (5250.0, 2.7)

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(k.lower() for k in vars(cls) if k.isupper())

    @classmethod
    def lookup(cls, name: str) -> Tuple[float, float]:
        key = str(name).strip().upper()
        if not key.isupper() or not hasattr(cls, key):
            raise ValueError(f"Unknown bottom type {name!r}; expected one of {cls.names()}")
        return getattr(cls, key)


@dataclass(frozen=True)
class Environment:
    """Acoustic properties of air, water and seabed half-spaces.

    Depths are z coordinates (m) with the air/water interface at ``air_z = 0``
    and z decreasing downwards. Densities are in g/cm^3, sound speeds in m/s.
    The ``*_alpha`` attenuations (dB/wavelength) are carried as metadata only.
    """
    seabed_z: float
    air_z: float = 0.0
    air_c: float = 343.21
    air_rho: float = 1.2041e-3
    water_z: float = 0.0
    water_c: float = 1500.0
    water_rho: float = 1.0
    water_alpha: float = 1.001438340469e-4
    seabed_c: float = 1550.0
    seabed_rho: float = 1.8
    seabed_alpha: float = 0.2

    @classmethod
    def with_bottom_type(cls, seabed_z: float, bottom_type: str, **kwargs) -> "Environment":
        """Environment whose seabed speed and density come from a SeafloorType preset."""
        c, rho = SeafloorType.lookup(bottom_type)
        return cls(seabed_z=seabed_z, seabed_c=c, seabed_rho=rho, **kwargs)

    def boundary_z(self, boundary: Boundary) -> float:
        if boundary is Boundary.SURFACE:
            return self.water_z
        return self.seabed_z

    def as_dict(self) -> Dict[str, float]:
        return {
            'air_z_m': self.air_z,
            'water_z_m': self.water_z,
            'seabed_z_m': self.seabed_z,
            'air_c_ms': self.air_c,
            'water_c_ms': self.water_c,
            'seabed_c_ms': self.seabed_c,
            'air_rho': self.air_rho,
            'water_rho': self.water_rho,
            'seabed_rho': self.seabed_rho,
            'water_alpha_db_per_lambda': self.water_alpha,
            'seabed_alpha_db_per_lambda': self.seabed_alpha,
        }


class InvalidStoppingConditions(ValueError):
    """Raised when no stopping condition bounds the image recursion."""


def _is_nonneg(x: float) -> bool:
    return math.isfinite(x) and x >= 0


@dataclass(frozen=True)
class StoppingConditions:
    """Thresholds that terminate a branch of the image search.

    attenuation_thresh_db: max loss (dB) relative to the direct arrival
    bounce_count_thresh:   max number of boundary reflections
    time_lag_thresh:       max travel time (s) of a multipath arrival
    """
    attenuation_thresh_db: float = 100.0
    bounce_count_thresh: float = math.inf
    time_lag_thresh: float = math.inf

    @property
    def bounded_by_bounces(self) -> bool:
        return _is_nonneg(self.bounce_count_thresh)

    @property
    def bounded_by_time_lag(self) -> bool:
        return _is_nonneg(self.time_lag_thresh)

    def validate(self) -> None:
        """At least one threshold must be usable or the recursion may never end."""
        if not (math.isfinite(self.attenuation_thresh_db)
                or self.bounded_by_bounces
                or self.bounded_by_time_lag):
            raise InvalidStoppingConditions(
                "invalid stopping conditions: set a finite attenuation threshold, "
                "or a finite non-negative bounce count or time lag threshold"
            )
        if not (self.bounded_by_bounces or self.bounded_by_time_lag):
            logger.warning(
                "Image search is bounded only by the %.1f dB attenuation threshold; "
                "set bounce_count_thresh or time_lag_thresh to cap the recursion",
                self.attenuation_thresh_db,
            )

"""
Plane-Wave Reflection Coefficients
----------------------------------
Fluid-fluid interface reflection, Jensen et al., Computational Ocean
Acoustics (2000), Eq. (2.127). Water is always the incident medium.
"""
from __future__ import annotations

import numpy as np

from environment import Boundary, Environment

__all__ = [
    "reflection_coefficient",
    "critical_angle",
    "surface_reflection_coefficient",
    "seabed_reflection_coefficient",
    "boundary_reflection_coefficient",
]


def reflection_coefficient(grazing_angle, c1: float, rho1: float,
                           c2: float, rho2: float) -> np.ndarray:
    """Complex reflection coefficient at grazing angle(s) in radians.

    Below the critical grazing angle the vertical wavenumber in medium 2 is
    imaginary and |R| = 1 (total internal reflection).
    """
    ang = np.asarray(grazing_angle, dtype=float)
    k1 = 1.0 / c1
    k2 = 1.0 / c2
    kr = np.cos(ang) * k1
    kz1 = np.sin(ang) * k1
    kz2 = np.sqrt(k2**2 - kr**2 + 0j)

    t1 = rho2 * kz1
    t2 = rho1 * kz2
    with np.errstate(invalid="ignore", divide="ignore"):
        return (t1 - t2) / (t1 + t2)


def critical_angle(c1: float, c2: float) -> float:
    """Critical grazing angle (rad, from horizontal); 0 when c2 <= c1."""
    return float(np.real(np.arccos(np.complex128(c1 / c2))))


def surface_reflection_coefficient(env: Environment, grazing_angle) -> np.ndarray:
    return reflection_coefficient(grazing_angle, env.water_c, env.water_rho,
                                  env.air_c, env.air_rho)


def seabed_reflection_coefficient(env: Environment, grazing_angle) -> np.ndarray:
    # single seabed layer
    return reflection_coefficient(grazing_angle, env.water_c, env.water_rho,
                                  env.seabed_c, env.seabed_rho)


def boundary_reflection_coefficient(env: Environment, boundary: Boundary,
                                    grazing_angle) -> np.ndarray:
    if boundary is Boundary.SURFACE:
        return surface_reflection_coefficient(env, grazing_angle)
    return seabed_reflection_coefficient(env, grazing_angle)

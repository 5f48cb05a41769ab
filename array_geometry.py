"""
Source / Receiver Geometry for the Image Method
-----------------------------------------------
Receiver-relative vectors and distances for arbitrary point sets (true
sources or their images) and the mirror transform across a horizontal plane.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence
import numpy as np

__all__ = [
    "Geometry",
    "mirror",
    "create_line_array",
]


def _as_points(xyz, name: str) -> np.ndarray:
    pts = np.array(xyz, dtype=float, ndmin=2)
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"{name} must be an N-by-3 array of [x, y, z], got shape {pts.shape}")
    pts.setflags(write=False)
    return pts


def mirror(points: np.ndarray, boundary_z: float) -> np.ndarray:
    """Image of each point reflected over the plane z = boundary_z (P-by-3)."""
    img = np.array(points, dtype=float, copy=True)
    img[:, 2] = boundary_z - (img[:, 2] - boundary_z)
    return img


@dataclass(frozen=True, eq=False)
class Geometry:
    """Fixed source and receiver positions (m)."""
    sources_xyz: np.ndarray    # S-by-3
    receivers_xyz: np.ndarray  # R-by-3

    def __post_init__(self):
        object.__setattr__(self, "sources_xyz", _as_points(self.sources_xyz, "sources_xyz"))
        object.__setattr__(self, "receivers_xyz", _as_points(self.receivers_xyz, "receivers_xyz"))

    @property
    def n_sources(self) -> int:
        return self.sources_xyz.shape[0]

    @property
    def n_receivers(self) -> int:
        return self.receivers_xyz.shape[0]

    def vector_to_receivers(self, points: np.ndarray) -> np.ndarray:
        """R-by-P-by-3 vectors with head at each receiver and tail at each point."""
        pts = np.asarray(points, dtype=float).reshape(-1, 3)
        return self.receivers_xyz[:, None, :] - pts[None, :, :]

    def distance_to_receivers(self, points: np.ndarray) -> np.ndarray:
        """R-by-P Euclidean distances between each receiver and each point."""
        return np.linalg.norm(self.vector_to_receivers(points), axis=-1)

    def receivers_on_plane(self, z: float) -> bool:
        return bool(np.all(self.receivers_xyz[:, 2] == z))

    def sources_on_plane(self, z: float) -> bool:
        return bool(np.all(self.sources_xyz[:, 2] == z))

    def array_stats(self) -> dict:
        """Receiver array summary for logging."""
        rx = self.receivers_xyz
        if self.n_receivers > 1:
            pair = np.linalg.norm(rx[:, None, :] - rx[None, :, :], axis=-1)
            aperture = float(pair.max())
            spacing = float(pair[np.triu_indices(self.n_receivers, k=1)].min())
        else:
            aperture = spacing = 0.0
        return {
            'n_sources': self.n_sources,
            'n_receivers': self.n_receivers,
            'aperture_m': aperture,
            'min_spacing_m': spacing,
            'array_center': rx.mean(axis=0),
        }


def create_line_array(x_positions: Sequence[float], y: float = 0.0, z: float = 0.0,
                      centered: bool = True) -> np.ndarray:
    """Receivers along a horizontal line parallel to x.

    Args:
        x_positions: element x coordinates (m)
        y, z: common y coordinate and depth of the line
        centered: subtract the mean x so the array is centred on x = 0

    Returns:
        R-by-3 receiver coordinates

    Example:
        # two hydrophones 11 m apart lying on a seabed at -12 m
        receivers = create_line_array([0, 11], z=-12)
    """
    x = np.asarray(x_positions, dtype=float).ravel()
    if centered and x.size:
        x = x - x.mean()
    return np.column_stack([x, np.full_like(x, y), np.full_like(x, z)])

"""
Image Source Records and the Image Collection
---------------------------------------------
Every eigenray found by the image search is stored as one ``Image`` record
holding all of its per-receiver quantities, keyed by its breadcrumb (the
ordered boundaries it reflected from).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union
import numpy as np
import pandas as pd

from array_geometry import Geometry
from environment import Boundary

__all__ = [
    "Breadcrumb",
    "parse_breadcrumb",
    "format_breadcrumb",
    "Image",
    "ImageCollection",
]

Breadcrumb = Tuple[Boundary, ...]
BreadcrumbLike = Union[str, Sequence[Union[Boundary, str]]]


def parse_breadcrumb(code: BreadcrumbLike) -> Breadcrumb:
    """Convert ``'bs'`` or ``[Boundary.BOTTOM, 's']`` to a breadcrumb tuple."""
    try:
        return tuple(b if isinstance(b, Boundary) else Boundary(b) for b in code)
    except ValueError as e:
        raise ValueError(f"Invalid breadcrumb {code!r}: codes must be 's' or 'b'") from e


def format_breadcrumb(breadcrumb: Breadcrumb) -> str:
    return "".join(b.value for b in breadcrumb)


@dataclass(eq=False)
class Image:
    """One image source (or the direct path) for all true sources."""
    xyz: np.ndarray            # S-by-3 image coordinates
    dist: np.ndarray           # R-by-S distance to each receiver (m)
    vec: np.ndarray            # R-by-S-by-3 receiver minus image
    grazing_angle: np.ndarray  # R-by-S (rad), NaN for the direct path
    rcoeff: np.ndarray         # R-by-S cumulative reflection coefficient
    breadcrumb: Breadcrumb = ()

    @property
    def n_surface(self) -> int:
        return sum(1 for b in self.breadcrumb if b is Boundary.SURFACE)

    @property
    def n_bottom(self) -> int:
        return sum(1 for b in self.breadcrumb if b is Boundary.BOTTOM)

    @property
    def order(self) -> int:
        """Reflection order (0 = direct)."""
        return len(self.breadcrumb)


class ImageCollection:
    """Ordered images in discovery order, bound to the geometry they were found for."""

    def __init__(self, geometry: Geometry, images: Optional[Iterable[Image]] = None):
        self.geometry = geometry
        self._images: List[Image] = list(images) if images is not None else []

    # ------------------------------------------------------------------
    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[Image]:
        return iter(self._images)

    def __getitem__(self, index: int) -> Image:
        return self._images[index]

    def __repr__(self) -> str:
        return f"ImageCollection({self.breadcrumbs()!r})"

    def count(self) -> int:
        return len(self._images)

    def append(self, image: Image) -> None:
        self._images.append(image)

    def breadcrumbs(self) -> List[str]:
        return [format_breadcrumb(img.breadcrumb) for img in self._images]

    # ------------------------------------------------------------------
    def lookup_by_breadcrumb(self, code: BreadcrumbLike) -> Optional[int]:
        """Index of the first image with this breadcrumb, or None if absent."""
        try:
            target = parse_breadcrumb(code)
        except ValueError:
            return None
        for n, img in enumerate(self._images):
            if img.breadcrumb == target:
                return n
        return None

    def indices_of(self, *codes: BreadcrumbLike) -> List[int]:
        """Indices for several breadcrumbs; codes that were not found are dropped."""
        found = (self.lookup_by_breadcrumb(c) for c in codes)
        return [n for n in found if n is not None]

    def retain(self, indices: Iterable[int]) -> None:
        """Keep only the images at ``indices``, in that order.

        Raises IndexError, leaving the collection unchanged, if any index is
        out of range, and TypeError if any is not an integer.
        """
        indices = self._checked_indices(indices)
        self._images = [self._images[n] for n in indices]

    def clear(self) -> None:
        self._images = []

    def resolve_indices(self, image_indices: Union[int, Iterable[int], None] = None) -> List[int]:
        if image_indices is None:
            return list(range(len(self._images)))
        return self._checked_indices(image_indices)

    def _checked_indices(self, indices) -> List[int]:
        if not np.isscalar(indices):
            indices = list(indices)
        arr = np.atleast_1d(np.asarray(indices))
        if arr.size and not np.issubdtype(arr.dtype, np.integer):
            raise TypeError(f"Image indices must be integers, got {indices!r}")
        indices = [int(n) for n in arr.ravel()]
        bad = [n for n in indices if not 0 <= n < len(self._images)]
        if bad:
            raise IndexError(
                f"Image indices {bad} out of range for collection of {len(self._images)} images"
            )
        return indices

    # ------------------------------------------------------------------
    def to_dataframe(self, sound_speed: Optional[float] = None) -> pd.DataFrame:
        """Eigenray arrival table, one row per image, receiver and source."""
        rows = []
        for n, img in enumerate(self._images):
            n_rcv, n_src = img.dist.shape
            for r in range(n_rcv):
                for s in range(n_src):
                    amp = abs(complex(img.rcoeff[r, s]))
                    row = {
                        'image': n,
                        'breadcrumb': format_breadcrumb(img.breadcrumb),
                        'order': img.order,
                        'n_surface': img.n_surface,
                        'n_bottom': img.n_bottom,
                        'receiver': r,
                        'source': s,
                        'x': float(img.xyz[s, 0]),
                        'y': float(img.xyz[s, 1]),
                        'z': float(img.xyz[s, 2]),
                        'distance_m': float(img.dist[r, s]),
                        'grazing_angle_deg': float(np.degrees(img.grazing_angle[r, s])),
                        'rcoeff_abs': amp,
                        'reflection_loss_db': float(-20 * np.log10(amp)) if amp > 0 else np.inf,
                    }
                    if sound_speed is not None:
                        row['travel_time_s'] = float(img.dist[r, s]) / sound_speed
                    rows.append(row)
        columns = ['image', 'breadcrumb', 'order', 'n_surface', 'n_bottom', 'receiver',
                   'source', 'x', 'y', 'z', 'distance_m', 'grazing_angle_deg',
                   'rcoeff_abs', 'reflection_loss_db']
        if sound_speed is not None:
            columns.append('travel_time_s')
        return pd.DataFrame(rows, columns=columns)

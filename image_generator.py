"""
Recursive Image Search
----------------------
Starting from the true sources, images are found by mirroring alternately
across the surface and the seabed. One branch starts at each boundary and
runs until a stopping condition fires.
"""
from __future__ import annotations

import logging
import numpy as np

from array_geometry import Geometry, mirror
from environment import Boundary, Environment, StoppingConditions
from images import Image, ImageCollection
from reflection import boundary_reflection_coefficient

__all__ = ["generate_images", "grazing_angle"]

logger = logging.getLogger(__name__)


def grazing_angle(vec: np.ndarray) -> np.ndarray:
    """Angle from horizontal of each R-by-P-by-3 vector; same for every boundary."""
    return np.abs(np.arctan2(vec[..., 2], np.hypot(vec[..., 0], vec[..., 1])))


def _direct_path(geometry: Geometry) -> Image:
    src = geometry.sources_xyz
    shape = (geometry.n_receivers, geometry.n_sources)
    return Image(
        xyz=np.array(src),
        dist=geometry.distance_to_receivers(src),
        vec=geometry.vector_to_receivers(src),
        grazing_angle=np.full(shape, np.nan),
        rcoeff=np.ones(shape, dtype=complex),
        breadcrumb=(),
    )


def _walk_branch(env: Environment, geometry: Geometry, stop: StoppingConditions,
                 first: Boundary, images: ImageCollection) -> str:
    """Append the images of one branch to ``images``. Returns the stop reason."""
    last_xyz = geometry.sources_xyz
    last_bc = ()
    nbnc = {Boundary.SURFACE: 0, Boundary.BOTTOM: 0}
    bndry = first

    with np.errstate(divide="ignore"):
        spreading_loss_dir_db = 20 * np.log10(geometry.distance_to_receivers(geometry.sources_xyz))

    while True:
        if nbnc[Boundary.SURFACE] + nbnc[Boundary.BOTTOM] >= stop.bounce_count_thresh:
            return "bounce count"

        boundary_z = env.boundary_z(bndry)
        curr_bc = last_bc + (bndry,)
        curr_xyz = mirror(last_xyz, boundary_z)
        nbnc[bndry] += 1
        bndry = bndry.other

        # a receiver sitting on a boundary cannot have that boundary as its last
        # reflection; keep recursing through this image without recording it
        if geometry.receivers_on_plane(boundary_z):
            last_xyz, last_bc = curr_xyz, curr_bc
            continue

        vec = geometry.vector_to_receivers(curr_xyz)
        dist = np.linalg.norm(vec, axis=-1)

        if np.isfinite(stop.time_lag_thresh):
            lag = dist / env.water_c
            if np.all(lag > stop.time_lag_thresh):
                return "time lag"

        grz = grazing_angle(vec)

        rcoeff = np.ones(dist.shape, dtype=complex)
        for b, count in nbnc.items():
            if count > 0:
                rcoeff = rcoeff * boundary_reflection_coefficient(env, b, grz) ** count

        if np.isfinite(stop.attenuation_thresh_db):
            with np.errstate(divide="ignore", invalid="ignore"):
                spreading_loss_db = 20 * np.log10(dist)
                reflection_loss_db = -20 * np.log10(np.abs(rcoeff))
            loss_rel_db = spreading_loss_db - spreading_loss_dir_db + reflection_loss_db
            if np.all(loss_rel_db > stop.attenuation_thresh_db):
                return "attenuation"

        images.append(Image(
            xyz=curr_xyz,
            dist=dist,
            vec=vec,
            grazing_angle=grz,
            rcoeff=rcoeff,
            breadcrumb=curr_bc,
        ))
        last_xyz, last_bc = curr_xyz, curr_bc


def generate_images(env: Environment, geometry: Geometry,
                    stop: StoppingConditions = StoppingConditions()) -> ImageCollection:
    """Find all images (eigenrays) for the given environment and geometry.

    The direct path is always first, followed by the surface branch and then
    the bottom branch in discovery order.

    Raises:
        InvalidStoppingConditions: if no threshold bounds the recursion
    """
    stop.validate()

    images = ImageCollection(geometry)
    images.append(_direct_path(geometry))

    for first in (Boundary.SURFACE, Boundary.BOTTOM):
        # nothing to reflect when every source already lies on the boundary
        if geometry.sources_on_plane(env.boundary_z(first)):
            logger.debug("Skipping %s branch: all sources lie on the boundary", first.name.lower())
            continue
        n_before = len(images)
        reason = _walk_branch(env, geometry, stop, first, images)
        logger.debug("%s branch: %d images, stopped on %s",
                     first.name.lower(), len(images) - n_before, reason)

    logger.info("Image search found %d images for %d sources and %d receivers",
                len(images), geometry.n_sources, geometry.n_receivers)
    return images

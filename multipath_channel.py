"""
Image-Method Multipath Channel
------------------------------
Channel object tying environment, geometry and stopping conditions of a
single-seabed-layer, isovelocity waveguide to the image search and the
spectral synthesis of its eigenrays.
"""
from __future__ import annotations

import logging
from typing import Dict
import numpy as np

from array_geometry import Geometry
from environment import Environment, StoppingConditions, SeafloorType
from image_generator import generate_images
from images import ImageCollection
from reflection import critical_angle
from spectra import IndexSpec, clairvoyant_csdm, clairvoyant_csdm_with_decoherence, transfer_function

__all__ = ["ImageMethodChannel"]

logger = logging.getLogger(__name__)


class ImageMethodChannel:
    """Multipath channel for a source/receiver geometry in a shallow-water waveguide."""

    def __init__(self,
                 environment: Environment,
                 geometry: Geometry,
                 stopping: StoppingConditions = StoppingConditions()):
        self.env = environment
        self.geometry = geometry
        self.stopping = stopping

        # Validate parameters
        if not environment.seabed_z < environment.water_z:
            raise ValueError(
                f"Seabed ({environment.seabed_z}m) must lie below the surface ({environment.water_z}m)"
            )
        if environment.water_c < 1400 or environment.water_c > 1600:
            logger.warning("Sound speed %s m/s is outside typical range 1400-1600 m/s",
                           environment.water_c)

    @classmethod
    def from_site_survey(cls,
                         seabed_z: float,
                         geometry: Geometry,
                         water_temp_c: float,
                         salinity_ppt: float = 35.0,
                         bottom_type: str = "sand",
                         stopping: StoppingConditions = StoppingConditions()) -> 'ImageMethodChannel':
        """Create channel from measured environmental parameters."""

        # UNESCO sound speed formula (simplified), pressure term at mid-depth
        T = water_temp_c
        c = 1449.2 + 4.6*T - 0.055*T**2 + 0.00029*T**3
        c += (1.34 - 0.010*T) * (salinity_ppt - 35)
        c += 0.016 * abs(seabed_z) / 2

        seabed_c, seabed_rho = SeafloorType.lookup(bottom_type)
        env = Environment(seabed_z=seabed_z, water_c=c,
                          seabed_c=seabed_c, seabed_rho=seabed_rho)
        return cls(env, geometry, stopping)

    # ------------------------------------------------------------------
    def generate_images(self) -> ImageCollection:
        """Run the image search; each call returns a fresh collection."""
        return generate_images(self.env, self.geometry, self.stopping)

    def transfer_function(self, images: ImageCollection, freqs,
                          image_indices: IndexSpec = None) -> np.ndarray:
        return transfer_function(images, self.env.water_c, freqs, image_indices)

    def clairvoyant_csdm(self, images: ImageCollection, freqs,
                         image_indices: IndexSpec = None) -> np.ndarray:
        return clairvoyant_csdm(images, self.env.water_c, freqs, image_indices)

    def clairvoyant_csdm_with_decoherence(self, images: ImageCollection, freqs,
                                          coherence_surface: float,
                                          coherence_seabed: float,
                                          image_indices: IndexSpec = None) -> np.ndarray:
        return clairvoyant_csdm_with_decoherence(
            images, self.env.water_c, freqs,
            coherence_surface, coherence_seabed, image_indices)

    def get_channel_info(self) -> Dict:
        """Return channel configuration for logging/debugging."""
        env = self.env
        return {
            **env.as_dict(),
            'seabed_critical_angle_deg': float(np.degrees(critical_angle(env.water_c, env.seabed_c))),
            'attenuation_thresh_db': self.stopping.attenuation_thresh_db,
            'bounce_count_thresh': self.stopping.bounce_count_thresh,
            'time_lag_thresh_s': self.stopping.time_lag_thresh,
            **self.geometry.array_stats(),
        }

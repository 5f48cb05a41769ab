"""
Image-Method Channel Configuration
==================================
YAML configuration, logging setup and result export for image-method runs.

Usage:
    python channel_config.py --create-config
    python channel_config.py --config channel_config.yaml

The run finds all eigenrays for the configured environment and geometry and
writes the arrival table (one row per image, receiver and source) to CSV.
"""

import argparse
import logging
import math
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional

import yaml

from array_geometry import Geometry, create_line_array
from environment import Environment, SeafloorType, StoppingConditions
from images import ImageCollection
from multipath_channel import ImageMethodChannel

__all__ = [
    "ModelConfig",
    "load_config",
    "setup_logging",
    "create_example_config",
    "save_arrivals",
    "run",
]

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _threshold(value) -> float:
    # YAML null or .inf both mean "unbounded"
    if value is None:
        return math.inf
    return float(value)


@dataclass
class ModelConfig:
    """Configuration parameters for one image-method run"""
    # Geometry (m, [x, y, z] per row)
    sources_xyz: List[list] = field(default_factory=list)
    receivers_xyz: List[list] = field(default_factory=list)

    # Environment
    seabed_z: float = -100.0
    bottom_type: Optional[str] = None   # "sand", "clay", ...; overrides seabed_c/rho
    air_c: float = 343.21
    air_rho: float = 1.2041e-3
    water_z: float = 0.0
    water_c: float = 1500.0
    water_rho: float = 1.0
    water_alpha: float = 1.001438340469e-4
    seabed_c: float = 1550.0
    seabed_rho: float = 1.8
    seabed_alpha: float = 0.2

    # Stopping conditions
    attenuation_thresh_db: Optional[float] = 100.0
    bounce_count_thresh: Optional[float] = None
    time_lag_thresh: Optional[float] = None

    # Output settings
    output_file: str = "arrivals.csv"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'ModelConfig':
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config_dict) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {unknown}")
        return cls(**config_dict)

    def build_environment(self) -> Environment:
        seabed_c, seabed_rho = self.seabed_c, self.seabed_rho
        if self.bottom_type:
            seabed_c, seabed_rho = SeafloorType.lookup(self.bottom_type)
        return Environment(
            seabed_z=float(self.seabed_z),
            air_c=self.air_c,
            air_rho=self.air_rho,
            water_z=self.water_z,
            water_c=self.water_c,
            water_rho=self.water_rho,
            water_alpha=self.water_alpha,
            seabed_c=seabed_c,
            seabed_rho=seabed_rho,
            seabed_alpha=self.seabed_alpha,
        )

    def build_geometry(self) -> Geometry:
        if not self.sources_xyz or not self.receivers_xyz:
            raise ValueError("Configuration must list at least one source and one receiver")
        return Geometry(self.sources_xyz, self.receivers_xyz)

    def build_stopping(self) -> StoppingConditions:
        return StoppingConditions(
            attenuation_thresh_db=_threshold(self.attenuation_thresh_db),
            bounce_count_thresh=_threshold(self.bounce_count_thresh),
            time_lag_thresh=_threshold(self.time_lag_thresh),
        )

    def build_channel(self) -> ImageMethodChannel:
        return ImageMethodChannel(self.build_environment(), self.build_geometry(),
                                  self.build_stopping())


def load_config(config_file: str) -> ModelConfig:
    """Load configuration from YAML file"""
    with open(config_file, 'r') as f:
        config_dict = yaml.safe_load(f) or {}
    return ModelConfig.from_dict(config_dict)


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure logging system"""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=getattr(logging, level.upper()), format=LOG_FORMAT,
                        handlers=handlers, force=True)


def save_arrivals(images: ImageCollection, output_file: str,
                  sound_speed: Optional[float] = None) -> None:
    """Save the eigenray arrival table to a CSV file"""
    df = images.to_dataframe(sound_speed=sound_speed)
    df.to_csv(output_file, index=False)
    logging.info(f"{len(images)} images ({len(df)} arrivals) saved to {output_file}")


def create_example_config(path: str = "channel_config.yaml") -> Dict[str, Any]:
    """Write an example configuration: four surface sources over a seabed pair"""
    seabed_z = -12.0
    config = {
        "sources_xyz": [
            [100.0, 100.0, 0.0],
            [-30.0, 100.0, 0.0],
            [-100.0, -20.0, 0.0],
            [10.0, -200.0, 0.0],
        ],
        # two hydrophones 11 m apart lying on the seabed
        "receivers_xyz": create_line_array([0.0, 11.0], z=seabed_z).tolist(),

        "seabed_z": seabed_z,
        "seabed_c": 1550.0,
        "seabed_rho": 1.2,
        "water_c": 1500.0,

        "attenuation_thresh_db": 100.0,
        "bounce_count_thresh": 10,
        "time_lag_thresh": None,

        "output_file": "arrivals.csv",
        "log_level": "INFO",
    }

    with open(path, "w") as f:
        yaml.safe_dump(config, f, default_flow_style=None, sort_keys=False)

    logging.info(f"Created example configuration: {path}")
    return config


def run(config: ModelConfig) -> ImageCollection:
    """Find the images for ``config`` and save the arrival table"""
    channel = config.build_channel()
    logging.info(f"Channel configuration: {channel.get_channel_info()}")

    images = channel.generate_images()
    logging.info(f"Eigenrays found: {images.breadcrumbs()}")

    if config.output_file:
        save_arrivals(images, config.output_file, sound_speed=channel.env.water_c)
    return images


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Image-method multipath channel")
    parser.add_argument("--config", default="channel_config.yaml",
                        help="Configuration file path")
    parser.add_argument("--create-config", action="store_true",
                        help="Create example configuration file")
    parser.add_argument("--log-file", default=None,
                        help="Also write the log to this file")

    args = parser.parse_args()

    if args.create_config:
        setup_logging("INFO")
        create_example_config(args.config)
    else:
        config = load_config(args.config)
        setup_logging(config.log_level, args.log_file)
        try:
            run(config)
        except Exception as e:
            logging.error(f"Run failed: {e}")
            raise

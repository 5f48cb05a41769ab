import numpy as np
import pytest

from array_geometry import Geometry, create_line_array
from environment import Environment, StoppingConditions
from image_generator import generate_images


@pytest.fixture
def env():
    return Environment(seabed_z=-12.0, seabed_c=1550.0, seabed_rho=1.2)


@pytest.fixture
def surface_sources_geometry():
    """Four sources at the sea surface, two receivers on the seabed."""
    sources = [
        [100.0, 100.0, 0.0],
        [-30.0, 100.0, 0.0],
        [-100.0, -20.0, 0.0],
        [10.0, -200.0, 0.0],
    ]
    return Geometry(sources, create_line_array([0.0, 11.0], z=-12.0))


@pytest.fixture
def midwater_geometry():
    """One source and three receivers strictly inside the water column."""
    receivers = create_line_array([0.0, 5.0, 10.0], z=-7.0)
    return Geometry([[40.0, 10.0, -4.0]], receivers)


@pytest.fixture
def midwater_images(env, midwater_geometry):
    stop = StoppingConditions(attenuation_thresh_db=np.inf, bounce_count_thresh=4)
    return generate_images(env, midwater_geometry, stop)

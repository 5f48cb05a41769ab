import logging

import numpy as np
import pytest

from environment import Environment, StoppingConditions
from multipath_channel import ImageMethodChannel
from spectra import clairvoyant_csdm, transfer_function


@pytest.fixture
def channel(env, surface_sources_geometry):
    return ImageMethodChannel(env, surface_sources_geometry,
                              StoppingConditions(bounce_count_thresh=10))


def test_channel_round_trip(channel) -> None:
    images = channel.generate_images()
    images.retain(images.indices_of("", "bs", "bsbs"))
    assert images.breadcrumbs() == ["", "bs", "bsbs"]

    freqs = np.linspace(1.0, 3000.0, 16)
    T = channel.transfer_function(images, freqs)
    assert T.shape == (16, 2, 4)
    np.testing.assert_allclose(T, transfer_function(images, 1500.0, freqs))
    np.testing.assert_allclose(channel.clairvoyant_csdm(images, freqs),
                               clairvoyant_csdm(images, 1500.0, freqs))
    np.testing.assert_allclose(
        channel.clairvoyant_csdm_with_decoherence(images, freqs, 1.0, 1.0),
        channel.clairvoyant_csdm(images, freqs))


def test_each_generation_is_independent(channel) -> None:
    first = channel.generate_images()
    first.clear()
    assert len(channel.generate_images()) > 1


def test_channel_info(channel) -> None:
    info = channel.get_channel_info()
    assert info['seabed_z_m'] == -12.0
    assert info['bounce_count_thresh'] == 10
    assert info['n_receivers'] == 2
    assert info['seabed_critical_angle_deg'] == pytest.approx(np.degrees(np.arccos(1500 / 1550)))


def test_seabed_above_surface_rejected(surface_sources_geometry) -> None:
    with pytest.raises(ValueError):
        ImageMethodChannel(Environment(seabed_z=5.0), surface_sources_geometry)


def test_unusual_sound_speed_is_logged(surface_sources_geometry, caplog) -> None:
    with caplog.at_level(logging.WARNING):
        ImageMethodChannel(Environment(seabed_z=-12.0, water_c=1700.0), surface_sources_geometry)
    assert "outside typical range" in caplog.text


def test_from_site_survey(midwater_geometry) -> None:
    channel = ImageMethodChannel.from_site_survey(
        -12.0, midwater_geometry, water_temp_c=15.0, bottom_type="silt",
        stopping=StoppingConditions(bounce_count_thresh=2))
    assert 1500.0 < channel.env.water_c < 1515.0
    assert channel.env.seabed_c == 1575.0
    assert len(channel.generate_images()) == 5

import numpy as np
import pytest

from environment import Boundary
from images import ImageCollection, format_breadcrumb, parse_breadcrumb


def test_parse_and_format_breadcrumbs() -> None:
    bc = parse_breadcrumb("bs")
    assert bc == (Boundary.BOTTOM, Boundary.SURFACE)
    assert parse_breadcrumb([Boundary.BOTTOM, "s"]) == bc
    assert parse_breadcrumb("") == ()
    assert format_breadcrumb(bc) == "bs"
    with pytest.raises(ValueError):
        parse_breadcrumb("bx")


def test_unknown_codes_are_not_found(midwater_images) -> None:
    assert midwater_images.lookup_by_breadcrumb("x") is None
    assert midwater_images.lookup_by_breadcrumb("bx") is None
    assert midwater_images.indices_of("", "x", "bs") == [0, 6]


def test_lookup_by_breadcrumb(midwater_images) -> None:
    assert midwater_images.lookup_by_breadcrumb("") == 0
    assert midwater_images.lookup_by_breadcrumb("s") == 1
    n = midwater_images.lookup_by_breadcrumb((Boundary.BOTTOM, Boundary.SURFACE))
    assert midwater_images.breadcrumbs()[n] == "bs"
    # absent is not an error
    assert midwater_images.lookup_by_breadcrumb("ss") is None
    assert midwater_images.lookup_by_breadcrumb("bsbsbs") is None


def test_batch_lookup_drops_missing(midwater_images) -> None:
    idx = midwater_images.indices_of("", "ss", "bs", "sbsbsbsb", "s")
    assert [midwater_images.breadcrumbs()[n] for n in idx] == ["", "bs", "s"]


def test_retain_all_is_identity(midwater_images) -> None:
    before = list(midwater_images)
    names = midwater_images.breadcrumbs()
    midwater_images.retain(range(len(midwater_images)))
    assert midwater_images.count() == len(before)
    assert midwater_images.breadcrumbs() == names
    for a, b in zip(before, midwater_images):
        np.testing.assert_array_equal(a.dist, b.dist)
        np.testing.assert_array_equal(a.rcoeff, b.rcoeff)
        np.testing.assert_array_equal(a.xyz, b.xyz)


def test_retain_renumbers_in_given_order(midwater_images) -> None:
    idx = midwater_images.indices_of("bsbs", "", "s")
    midwater_images.retain(idx)
    assert midwater_images.breadcrumbs() == ["bsbs", "", "s"]
    assert midwater_images.lookup_by_breadcrumb("") == 1


def test_retain_out_of_range_leaves_collection_untouched(midwater_images) -> None:
    names = midwater_images.breadcrumbs()
    with pytest.raises(IndexError):
        midwater_images.retain([0, 1, len(names)])
    with pytest.raises(IndexError):
        midwater_images.retain([-1])
    assert midwater_images.breadcrumbs() == names


def test_clear(midwater_images) -> None:
    midwater_images.clear()
    assert len(midwater_images) == 0
    assert midwater_images.lookup_by_breadcrumb("") is None
    assert midwater_images.indices_of("", "s") == []


def test_empty_collection_knows_its_geometry(midwater_geometry) -> None:
    images = ImageCollection(midwater_geometry)
    assert images.count() == 0
    assert images.geometry.n_receivers == 3


def test_arrival_table(midwater_images) -> None:
    df = midwater_images.to_dataframe(sound_speed=1500.0)
    assert len(df) == len(midwater_images) * 3
    direct = df[df['breadcrumb'] == '']
    assert (direct['order'] == 0).all()
    np.testing.assert_allclose(direct['rcoeff_abs'], 1.0)
    np.testing.assert_allclose(direct['reflection_loss_db'], 0.0, atol=1e-12)
    np.testing.assert_allclose(df['travel_time_s'], df['distance_m'] / 1500.0)
    bsbs = df[df['breadcrumb'] == 'bsbs']
    assert (bsbs['n_bottom'] == 2).all() and (bsbs['n_surface'] == 2).all()
    assert 'travel_time_s' not in midwater_images.to_dataframe().columns


def test_retain_rejects_fractional_indices(midwater_images) -> None:
    names = midwater_images.breadcrumbs()
    with pytest.raises(TypeError):
        midwater_images.retain([0, 1.9])
    assert midwater_images.breadcrumbs() == names

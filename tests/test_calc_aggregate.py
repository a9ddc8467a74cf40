import numpy as np
import pytest

from surface_flow.calc_aggregate import (
    aggregate_patch_depth,
    disaggregate_hru_depth,
    reconstruct_momentum,
    store_hru_state,
)


def test_aggregate_weights_patches_by_fraction():
    patch_start = np.array([0, 2], dtype=np.int64)
    patch_end = np.array([2, 3], dtype=np.int64)
    patch_frac = np.array([0.25, 0.75, 1.0])
    wdsrf = np.array([10.0, 30.0, 40.0])
    wdsrf_h = np.zeros(4)

    aggregate_patch_depth(2, patch_start, patch_end, patch_frac, wdsrf, wdsrf_h)

    np.testing.assert_allclose(wdsrf_h[:2], [0.025, 0.04])
    # Scratch beyond nhru is untouched
    np.testing.assert_array_equal(wdsrf_h[2:], 0.0)


def test_momentum_follows_lost_water():
    ihru = np.array([0], dtype=np.int64)
    veloc_h = np.zeros(1)
    momtm_h = np.zeros(1)

    # Depth dropped from 0.1 to 0.05
    reconstruct_momentum(1, ihru, np.array([0.1]), np.array([2.0]), np.array([0.05]), veloc_h, momtm_h)
    assert veloc_h[0] == 2.0
    assert momtm_h[0] == pytest.approx(0.1)


def test_added_water_carries_no_momentum():
    ihru = np.array([0], dtype=np.int64)
    veloc_h = np.zeros(1)
    momtm_h = np.zeros(1)

    # Depth rose from 0.05 to 0.1
    reconstruct_momentum(1, ihru, np.array([0.05]), np.array([2.0]), np.array([0.1]), veloc_h, momtm_h)
    assert momtm_h[0] == pytest.approx(0.1)


def test_store_and_disaggregate():
    ihru = np.array([3, 1], dtype=np.int64)
    wdsrf_h = np.array([0.02, 0.005])
    veloc_h = np.array([-0.1, 0.3])
    wdsrf_hru = np.zeros(4)
    veloc_hru = np.zeros(4)

    store_hru_state(2, ihru, wdsrf_h, veloc_h, wdsrf_hru, veloc_hru)
    np.testing.assert_array_equal(wdsrf_hru, [0.0, 0.005, 0.0, 0.02])
    np.testing.assert_array_equal(veloc_hru, [0.0, 0.3, 0.0, -0.1])

    wdsrf = np.full(4, -1.0)
    disaggregate_hru_depth(2, np.array([0, 3], dtype=np.int64), np.array([3, 4], dtype=np.int64),
                           wdsrf_h, wdsrf)
    np.testing.assert_allclose(wdsrf, [20.0, 20.0, 20.0, 5.0])

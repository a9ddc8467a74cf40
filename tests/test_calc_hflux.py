import numpy as np
import pytest

from surface_flow.calc_hflux import (
    IFACE_DRY_DN,
    IFACE_DRY_DRY,
    IFACE_DRY_UP,
    IFACE_WET_WET,
    calc_interface_fluxes,
    classify_interface,
    reconstruct_interface,
    riemann_flux,
    wave_speeds,
)

GRAV = 9.80616
PONDMIN = 1.0e-4


def test_reconstruct_lowers_downstream_side_by_both_hand():
    assert reconstruct_interface(0.5, 0.875, 0.25, 0.125) == (0.5, 0.5)


def test_reconstruct_floors_downstream_depth_at_zero():
    wdsrf_up, wdsrf_dn = reconstruct_interface(0.1, 0.05, 0.1, 0.1)
    assert wdsrf_up == 0.1
    assert wdsrf_dn == 0.0


@pytest.mark.parametrize("wdsrf_up, wdsrf_dn, expected", [
    (0.1, 0.2, IFACE_WET_WET),
    (0.1, 0.0, IFACE_DRY_DN),
    (0.0, 0.2, IFACE_DRY_UP),
    (0.0, 0.0, IFACE_DRY_DRY),
])
def test_classify_interface(wdsrf_up, wdsrf_dn, expected):
    assert classify_interface(wdsrf_up, wdsrf_dn) == expected


def test_dry_dry_interface_has_no_flux():
    iface, hflux, mflux = riemann_flux(0.0, 0.0, 0.0, 0.0, GRAV)
    assert iface == IFACE_DRY_DRY
    assert hflux == 0.0
    assert mflux == 0.0


def test_wet_wet_still_water_balances_pressure():
    h = 0.5
    iface, hflux, mflux = riemann_flux(h, h, 0.0, 0.0, GRAV)
    assert iface == IFACE_WET_WET
    assert hflux == 0.0
    assert mflux == pytest.approx(0.5 * GRAV * h**2, rel=1e-14)


def test_dry_downstream_front_speed():
    h = 0.1
    cel = np.sqrt(GRAV * h)
    vwave_up, vwave_dn = wave_speeds(IFACE_DRY_DN, h, 0.0, 0.0, 0.0, GRAV)
    assert vwave_up == pytest.approx(-cel)
    assert vwave_dn == pytest.approx(2.0 * cel)

    iface, hflux, mflux = riemann_flux(h, 0.0, 0.0, 0.0, GRAV)
    assert iface == IFACE_DRY_DN
    assert hflux == pytest.approx(2.0 / 3.0 * cel * h)
    assert mflux == pytest.approx(2.0 / 3.0 * 0.5 * GRAV * h**2)


def test_dry_upstream_front_speed():
    h = 0.1
    cel = np.sqrt(GRAV * h)
    vwave_up, vwave_dn = wave_speeds(IFACE_DRY_UP, 0.0, h, 0.0, 0.0, GRAV)
    assert vwave_up == pytest.approx(-2.0 * cel)
    assert vwave_dn == pytest.approx(cel)

    iface, hflux, mflux = riemann_flux(0.0, h, 0.0, 0.0, GRAV)
    assert iface == IFACE_DRY_UP
    assert hflux == pytest.approx(-2.0 / 3.0 * cel * h)
    assert np.isfinite(mflux)


def test_supercritical_downstream_takes_upstream_flux():
    h = 0.01
    iface, hflux, mflux = riemann_flux(h, h, 5.0, 5.0, GRAV)
    assert iface == IFACE_WET_WET
    assert hflux == 5.0 * h
    assert mflux == pytest.approx(25.0 * h + 0.5 * GRAV * h**2, rel=1e-14)


def test_supercritical_upstream_takes_downstream_flux():
    h = 0.01
    _, hflux, mflux = riemann_flux(h, h, -5.0, -5.0, GRAV)
    assert hflux == -5.0 * h
    assert mflux == pytest.approx(25.0 * h + 0.5 * GRAV * h**2, rel=1e-14)


def _sweep(basin, wdsrf_h, veloc_h):
    n = basin.nhru
    sums = [np.full(n, np.nan) for _ in range(3)]
    nactive = calc_interface_fluxes(n, basin.order, basin.downstream, basin.flen, basin.hand,
                                    PONDMIN, GRAV, np.asarray(wdsrf_h, dtype=np.float64),
                                    np.asarray(veloc_h, dtype=np.float64), *sums)
    return nactive, sums


def test_dry_dry_link_is_skipped(make_network):
    basin = make_network([{'downstream': [-1, 0]}]).basins[0]
    nactive, (sum_hflux, sum_mflux, sum_zgrad) = _sweep(basin, [5.0e-5, 5.0e-5], [0.0, 0.0])

    assert nactive == 0
    for arr in (sum_hflux, sum_mflux, sum_zgrad):
        np.testing.assert_array_equal(arr, 0.0)


def test_fluxes_are_exchanged_between_neighbours(tree_network):
    basin = tree_network.basins[0]
    # Link 1 -> 0 is dry on both sides
    wdsrf_h = [0.0, 0.0, 0.15, 0.3, 0.05, 0.0]
    veloc_h = [0.0, 0.0, 0.4, 0.2, 0.0, 0.0]
    nactive, (sum_hflux, sum_mflux, _) = _sweep(basin, wdsrf_h, veloc_h)

    assert nactive == 4
    assert np.sum(sum_hflux) == pytest.approx(0.0, abs=1e-14)
    assert np.sum(sum_mflux) == pytest.approx(0.0, abs=1e-12)


def test_flat_still_water_has_no_net_force(make_network):
    basin = make_network([{'downstream': [-1, 0, 1], 'flen': [4.0, 7.0, 3.0]}]).basins[0]
    nactive, (sum_hflux, sum_mflux, sum_zgrad) = _sweep(basin, [0.5, 0.5, 0.5], [0.0, 0.0, 0.0])

    assert nactive == 2
    np.testing.assert_array_equal(sum_hflux, 0.0)
    np.testing.assert_allclose(sum_mflux - sum_zgrad, 0.0, atol=1e-12)


def test_reconstructed_rest_state_has_no_net_force(make_network):
    # Downstream depth minus both heights above drainage equals upstream depth
    basin = make_network([{'downstream': [-1, 0], 'hand': [0.125, 0.25]}]).basins[0]
    nactive, (sum_hflux, sum_mflux, sum_zgrad) = _sweep(basin, [0.875, 0.5], [0.0, 0.0])

    assert nactive == 1
    np.testing.assert_array_equal(sum_hflux, 0.0)
    np.testing.assert_allclose(sum_mflux - sum_zgrad, 0.0, atol=1e-12)


def test_uniform_depth_on_terrain_drains_downhill(make_network):
    basin = make_network([{'downstream': [-1, 0], 'hand': [0.1, 0.1]}]).basins[0]
    _, (sum_hflux, _, _) = _sweep(basin, [0.5, 0.5], [0.0, 0.0])

    assert sum_hflux[1] > 0.0
    assert sum_hflux[0] == -sum_hflux[1]

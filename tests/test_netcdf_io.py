import numpy as np
import pytest
from netCDF4 import Dataset

from surface_network import read_surface_network, write_surface_network


def test_write_read_preserves_network(tmp_path, tree_network):
    nc_file = str(tmp_path / 'network.nc')
    write_surface_network(nc_file, tree_network)

    network = read_surface_network(nc_file, verbose=False)

    assert network.nbasin == tree_network.nbasin
    assert network.nhru == tree_network.nhru
    np.testing.assert_allclose(network.patch_frac, tree_network.patch_frac)
    for got, expected in zip(network.basins, tree_network.basins):
        assert got.basin_id == expected.basin_id
        assert got.outlet == expected.outlet
        np.testing.assert_array_equal(got.ihru, expected.ihru)
        np.testing.assert_array_equal(got.downstream, expected.downstream)
        np.testing.assert_array_equal(got.order, expected.order)
        np.testing.assert_allclose(got.flen, expected.flen)
        np.testing.assert_allclose(got.hand, expected.hand)
        np.testing.assert_allclose(got.area, expected.area)
        np.testing.assert_array_equal(got.patch_start, expected.patch_start)
        np.testing.assert_array_equal(got.patch_end, expected.patch_end)


def _write_minimal(nc_file, skip=()):
    """Two-HRU basin with only the required variables"""
    values = {
        'basin_hru_start': ('basin', 'i4', [0]),
        'basin_nhru': ('basin', 'i4', [2]),
        'hru_next': ('hru', 'i4', [-1, 0]),
        'hru_flen': ('hru', 'f8', [10.0, 10.0]),
        'hru_plen': ('hru', 'f8', [30.0, 30.0]),
        'hru_area': ('hru', 'f8', [1000.0, 1000.0]),
        'hru_patch_start': ('hru', 'i4', [0, 1]),
        'hru_patch_end': ('hru', 'i4', [1, 2]),
    }
    with Dataset(nc_file, 'w') as f:
        f.createDimension('basin', 1)
        f.createDimension('hru', 2)
        f.createDimension('patch', 2)
        for name, (dim, dtype, data) in values.items():
            if name in skip:
                continue
            f.createVariable(name, dtype, (dim,))[:] = data


def test_optional_variables_take_defaults(tmp_path):
    nc_file = str(tmp_path / 'minimal.nc')
    _write_minimal(nc_file)

    network = read_surface_network(nc_file, verbose=False)

    basin = network.basins[0]
    assert basin.basin_id == 0
    np.testing.assert_array_equal(basin.hand, 0.0)
    np.testing.assert_array_equal(network.patch_frac, 1.0)


def test_missing_required_variable(tmp_path):
    nc_file = str(tmp_path / 'broken.nc')
    _write_minimal(nc_file, skip=('hru_flen',))

    with pytest.raises(ValueError, match="hru_flen"):
        read_surface_network(nc_file, verbose=False)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_surface_network(str(tmp_path / 'missing.nc'))

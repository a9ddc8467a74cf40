"""
NetCDF reader/writer for the hillslope surface network

HRUs of one basin are stored contiguously; hru_next holds the basin-local
downstream index (-1 at the outlet). Patch ranges index the patch dimension.
"""
import os
import numpy as np
from netCDF4 import Dataset

from .network import BasinTopology, SurfaceNetwork


def read_surface_network(nc_file, verbose=True):
    """
    Load a surface network from a netCDF file

    Parameters:
    -----------
    nc_file : str
        Path to the network file
    verbose : bool
        Print a load summary

    Returns:
    --------
    network : SurfaceNetwork
    """
    if not os.path.exists(nc_file):
        raise FileNotFoundError(f"Network file not found: {nc_file}")

    if verbose:
        print(f"  Loading surface network from: {nc_file}")

    with Dataset(nc_file, 'r') as f:
        for dim in ('basin', 'hru', 'patch'):
            if dim not in f.dimensions:
                raise ValueError(f"Dimension '{dim}' not found in {nc_file}")

        nbasin = len(f.dimensions['basin'])
        nhru = len(f.dimensions['hru'])
        npatch = len(f.dimensions['patch'])

        def read(name, default=None):
            if name in f.variables:
                return np.asarray(f.variables[name][:])
            if default is None:
                raise ValueError(f"Variable '{name}' not found in {nc_file}")
            return default

        basin_id = read('basin_id', np.arange(nbasin, dtype=np.int64))
        basin_hru_start = read('basin_hru_start')
        basin_nhru = read('basin_nhru')

        hru_next = read('hru_next')
        hru_flen = read('hru_flen')
        hru_plen = read('hru_plen')
        hru_area = read('hru_area')
        # Flat terrain when no height above drainage is given
        hru_hand = read('hru_hand', np.zeros(nhru, dtype=np.float64))
        hru_patch_start = read('hru_patch_start')
        hru_patch_end = read('hru_patch_end')

        patch_frac = read('patch_frac', np.ones(npatch, dtype=np.float64))

    basins = []
    for ib in range(nbasin):
        istt = int(basin_hru_start[ib])
        iend = istt + int(basin_nhru[ib])
        basins.append(BasinTopology(
            basin_id=basin_id[ib],
            ihru=np.arange(istt, iend, dtype=np.int64),
            downstream=hru_next[istt:iend],
            flen=hru_flen[istt:iend],
            plen=hru_plen[istt:iend],
            hand=hru_hand[istt:iend],
            area=hru_area[istt:iend],
            patch_start=hru_patch_start[istt:iend],
            patch_end=hru_patch_end[istt:iend],
        ))

    network = SurfaceNetwork(basins, patch_frac, nhru=nhru)

    if verbose:
        print(f"    Basins: {network.nbasin}")
        print(f"    HRUs: {network.nhru} (max {network.nhru_max} per basin)")
        print(f"    Patches: {network.npatch}")

    return network


def write_surface_network(nc_file, network, title='Hillslope Surface Network'):
    """
    Write a surface network to a netCDF file

    The HRUs of each basin must occupy a contiguous block of worker-wide
    HRU indices (as produced by read_surface_network).
    """
    nhru = network.nhru
    basin_id = np.zeros(network.nbasin, dtype=np.int32)
    basin_hru_start = np.zeros(network.nbasin, dtype=np.int32)
    basin_nhru = np.zeros(network.nbasin, dtype=np.int32)

    hru_next = np.full(nhru, -1, dtype=np.int32)
    hru_flen = np.zeros(nhru, dtype=np.float64)
    hru_plen = np.zeros(nhru, dtype=np.float64)
    hru_hand = np.zeros(nhru, dtype=np.float64)
    hru_area = np.zeros(nhru, dtype=np.float64)
    hru_patch_start = np.zeros(nhru, dtype=np.int32)
    hru_patch_end = np.zeros(nhru, dtype=np.int32)

    for ib, basin in enumerate(network.basins):
        istt = int(basin.ihru[0])
        if not np.array_equal(basin.ihru, np.arange(istt, istt + basin.nhru)):
            raise ValueError(f"Basin {basin.basin_id}: HRU indices are not contiguous")

        basin_id[ib] = basin.basin_id
        basin_hru_start[ib] = istt
        basin_nhru[ib] = basin.nhru

        sl = slice(istt, istt + basin.nhru)
        hru_next[sl] = basin.downstream
        hru_flen[sl] = basin.flen
        hru_plen[sl] = basin.plen
        hru_hand[sl] = basin.hand
        hru_area[sl] = basin.area
        hru_patch_start[sl] = basin.patch_start
        hru_patch_end[sl] = basin.patch_end

    with Dataset(nc_file, 'w', format='NETCDF4') as ncfile:
        ncfile.createDimension('basin', network.nbasin)
        ncfile.createDimension('hru', nhru)
        ncfile.createDimension('patch', network.npatch)

        ncfile.title = title
        ncfile.nbasin = network.nbasin
        ncfile.nhru = nhru
        ncfile.npatch = network.npatch

        def write(name, dtype, dim, data, long_name, units):
            var = ncfile.createVariable(name, dtype, (dim,))
            var.long_name = long_name
            var.units = units
            var[:] = data

        write('basin_id', 'i4', 'basin', basin_id, 'basin identifier', '1')
        write('basin_hru_start', 'i4', 'basin', basin_hru_start, 'first HRU of basin', '1')
        write('basin_nhru', 'i4', 'basin', basin_nhru, 'number of HRUs in basin', '1')

        write('hru_next', 'i4', 'hru', hru_next, 'basin-local downstream HRU index (-1: outlet)', '1')
        write('hru_flen', 'f8', 'hru', hru_flen, 'interface width with downstream HRU', 'm')
        write('hru_plen', 'f8', 'hru', hru_plen, 'flow path length', 'm')
        write('hru_hand', 'f8', 'hru', hru_hand, 'height above nearest drainage', 'm')
        write('hru_area', 'f8', 'hru', hru_area, 'HRU area', 'm2')
        write('hru_patch_start', 'i4', 'hru', hru_patch_start, 'first patch of HRU', '1')
        write('hru_patch_end', 'i4', 'hru', hru_patch_end, 'one past last patch of HRU', '1')

        write('patch_frac', 'f8', 'patch', network.patch_frac, 'patch area fraction in HRU', '1')

import numpy as np
import pytest

from surface_network import BasinTopology, Namelist, SurfaceNetwork


def build_network(layouts, npatch_per_hru=1):
    """
    Build a SurfaceNetwork from a list of basin layouts

    Each layout is a dict with 'downstream' and optional per-HRU 'flen',
    'plen', 'hand', 'area' (scalars or sequences). HRUs and patches are
    numbered contiguously across basins.
    """
    basins = []
    ihru0 = 0
    for ib, layout in enumerate(layouts):
        downstream = np.asarray(layout['downstream'])
        nhru = len(downstream)

        def field(name, default):
            return np.array(np.broadcast_to(np.asarray(layout.get(name, default), dtype=np.float64), (nhru,)))

        patch_start = (ihru0 + np.arange(nhru)) * npatch_per_hru
        basins.append(BasinTopology(
            basin_id=layout.get('basin_id', ib + 1),
            ihru=np.arange(ihru0, ihru0 + nhru),
            downstream=downstream,
            flen=field('flen', 10.0),
            plen=field('plen', 30.0),
            hand=field('hand', 0.0),
            area=field('area', 1000.0),
            patch_start=patch_start,
            patch_end=patch_start + npatch_per_hru,
        ))
        ihru0 += nhru

    patch_frac = np.full(ihru0 * npatch_per_hru, 1.0 / npatch_per_hru)
    return SurfaceNetwork(basins, patch_frac)


def set_hru_depth(network, state, wdsrf_mm):
    """Set every patch of worker-wide HRU k to wdsrf_mm[k], HRU state at rest"""
    for basin in network.basins:
        for i in range(basin.nhru):
            k = basin.ihru[i]
            state.wdsrf[basin.patch_start[i]:basin.patch_end[i]] = wdsrf_mm[k]
            state.wdsrf_hru[k] = wdsrf_mm[k] / 1.0e3
            state.veloc_hru[k] = 0.0


@pytest.fixture
def make_network():
    return build_network


@pytest.fixture
def set_depth():
    return set_hru_depth


@pytest.fixture
def nml():
    """Namelist with all defaults"""
    return Namelist()


@pytest.fixture
def chain2():
    """Two flat HRUs, HRU 1 drains into the outlet HRU 0"""
    return build_network([{'downstream': [-1, 0]}])


@pytest.fixture
def tree_network():
    """
    Three basins: a branching tree with terrain, a reversed chain whose
    outlet is the last HRU, and a single-HRU basin
    """
    return build_network([
        {
            'downstream': [-1, 0, 0, 1, 1, 2],
            'flen': [5.0, 8.0, 6.0, 4.0, 3.0, 5.0],
            'plen': [20.0, 25.0, 30.0, 15.0, 18.0, 22.0],
            'hand': [0.0, 0.5, 0.4, 1.2, 1.0, 0.9],
            'area': [2000.0, 1500.0, 1200.0, 800.0, 900.0, 700.0],
        },
        {
            'downstream': [1, 2, 3, -1],
            'hand': [0.3, 0.2, 0.1, 0.0],
            'area': [500.0, 600.0, 700.0, 800.0],
        },
        {
            'downstream': [-1],
        },
    ], npatch_per_hru=2)

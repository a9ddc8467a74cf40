"""
Patch <-> HRU transfer of surface water

Patch ponding depth is stored in mm, HRU depth in m.
"""
from numba import njit


@njit(cache=True)
def aggregate_patch_depth(nhru, patch_start, patch_end, patch_frac, wdsrf, wdsrf_h):
    """
    Area-fraction weighted patch depth of each HRU (JIT-compiled)

    Parameters:
    -----------
    nhru : int
        Number of HRUs in the basin
    patch_start, patch_end : ndarray (nhru,)
        Patch range of each HRU
    patch_frac : ndarray (npatch,)
        Patch area fraction
    wdsrf : ndarray (npatch,)
        Patch ponding depth [mm]
    wdsrf_h : ndarray
        HRU depth [m] (output)
    """
    for i in range(nhru):
        total = 0.0
        for ip in range(patch_start[i], patch_end[i]):
            total += wdsrf[ip] * patch_frac[ip]
        wdsrf_h[i] = total / 1.0e3


@njit(cache=True)
def reconstruct_momentum(nhru, ihru, wdsrf_hru, veloc_hru, wdsrf_h, veloc_h, momtm_h):
    """
    Momentum of each HRU from its stored velocity and new depth (JIT-compiled)

    Water lost since the last call takes its momentum with it; water gained
    carries no momentum.
    """
    for i in range(nhru):
        veloc_h[i] = veloc_hru[ihru[i]]
        if wdsrf_hru[ihru[i]] > wdsrf_h[i]:
            momtm_h[i] = wdsrf_h[i] * veloc_h[i]
        else:
            momtm_h[i] = wdsrf_hru[ihru[i]] * veloc_h[i]


@njit(cache=True)
def store_hru_state(nhru, ihru, wdsrf_h, veloc_h, wdsrf_hru, veloc_hru):
    for i in range(nhru):
        wdsrf_hru[ihru[i]] = wdsrf_h[i]
        veloc_hru[ihru[i]] = veloc_h[i]


@njit(cache=True)
def disaggregate_hru_depth(nhru, patch_start, patch_end, wdsrf_h, wdsrf):
    """Broadcast HRU depth [m] to all of its patches [mm] (JIT-compiled)"""
    for i in range(nhru):
        for ip in range(patch_start[i], patch_end[i]):
            wdsrf[ip] = wdsrf_h[i] * 1.0e3

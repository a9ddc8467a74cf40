"""
Adaptive sub-step length for hillslope surface flow
"""
import numpy as np
from numba import njit


# Constraint that bound the sub-step length
SUBSTEP_NONE = 0
SUBSTEP_CFL = 1
SUBSTEP_POSITIVITY = 2
SUBSTEP_REVERSAL = 3

SUBSTEP_NAMES = ('none', 'cfl', 'positivity', 'reversal')


@njit(cache=True)
def calc_substep(nhru, outlet, dt_res, plen, area, grav, pcfl, pvelrev, pdstfac,
                 wdsrf_h, veloc_h, momtm_h, sum_hflux_h, sum_mflux_h, sum_zgrad_h,
                 rsurf_h):
    """
    Largest admissible sub-step for one basin (JIT-compiled)

    Three constraints are applied, starting from the remaining time:
      1. CFL on every non-outlet HRU that is wet or moving
      2. Positivity: an HRU with net outflow cannot drain below zero
      3. Flow reversal: a fast HRU cannot reverse its nonzero momentum in one step

    Parameters:
    -----------
    nhru : int
        Number of HRUs in the basin
    outlet : int
        Basin-local index of the outlet HRU
    dt_res : float
        Remaining time of the outer step [s]
    plen, area : ndarray
        Flow path length [m] and area [m2]
    grav, pcfl, pvelrev, pdstfac : float
        Gravity, CFL factor, reversal speed threshold, downstream blending factor
    wdsrf_h, veloc_h, momtm_h : ndarray
        HRU depth [m], velocity [m/s], momentum [m2/s]
    sum_hflux_h, sum_mflux_h, sum_zgrad_h : ndarray
        Interface flux sums from calc_interface_fluxes
    rsurf_h : ndarray
        Net outflow rate [m/s] (output)

    Returns:
    --------
    dt_this : float
        Sub-step length [s]
    binding : int
        Constraint that bound dt_this (SUBSTEP_NONE when dt_this == dt_res)
    ibind : int
        HRU at which the binding constraint was found (-1 when none)
    """
    dt_this = dt_res
    binding = SUBSTEP_NONE
    ibind = -1

    for i in range(nhru):
        # Constraint 1: CFL condition
        if i != outlet:
            if veloc_h[i] != 0.0 or wdsrf_h[i] > 0.0:
                dt_cfl = plen[i] / (abs(veloc_h[i]) + np.sqrt(grav * wdsrf_h[i])) * pcfl
                if dt_cfl < dt_this:
                    dt_this = dt_cfl
                    binding = SUBSTEP_CFL
                    ibind = i

        # Constraint 2: avoid negative water depth
        rsurf_h[i] = sum_hflux_h[i] / area[i]
        if rsurf_h[i] > 0.0:
            dt_pos = pdstfac * wdsrf_h[i] / rsurf_h[i]
            if dt_pos < dt_this:
                dt_this = dt_pos
                binding = SUBSTEP_POSITIVITY
                ibind = i

        # Constraint 3: avoid change of flow direction
        fnet = sum_mflux_h[i] - sum_zgrad_h[i]
        # Zero momentum cannot change sign
        if momtm_h[i] != 0.0 and abs(veloc_h[i]) > pvelrev and veloc_h[i] * fnet > 0.0:
            dt_rev = pdstfac * abs(momtm_h[i] * area[i] / fnet)
            if dt_rev < dt_this:
                dt_this = dt_rev
                binding = SUBSTEP_REVERSAL
                ibind = i

    return dt_this, binding, ibind

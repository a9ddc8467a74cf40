"""
Interface Flux Module
Calculates water volume and momentum flux across the interface between an
HRU and its downstream neighbour

Uses an HLL approximate Riemann solver with two-rarefaction wave speed
estimates [Toro, 2001; Liang & Borthwick, 2009] and hydrostatic
reconstruction of interface depths [Audusse et al., 2004, SIAM J. Sci. Comput.]
"""
import numpy as np
from numba import njit


# Wet/dry class of an interface after hydrostatic reconstruction
IFACE_DRY_DRY = 0
IFACE_DRY_UP = 1
IFACE_DRY_DN = 2
IFACE_WET_WET = 3

IFACE_NAMES = ('dry-dry', 'dry-upstream', 'dry-downstream', 'wet-wet')


@njit(cache=True)
def reconstruct_interface(wdsrf_i, wdsrf_j, hand_i, hand_j):
    """
    Hydrostatic reconstruction of water depth on both sides of the interface

    Upstream side keeps its depth; downstream side is lowered by the heights
    above drainage of both HRUs and floored at zero.
    """
    wdsrf_up = wdsrf_i
    wdsrf_dn = max(0.0, wdsrf_j - hand_j - hand_i)
    return wdsrf_up, wdsrf_dn


@njit(cache=True)
def classify_interface(wdsrf_up, wdsrf_dn):
    """Classify reconstructed interface as dry-dry, dry-upstream, dry-downstream or wet-wet"""
    if wdsrf_up > 0.0:
        if wdsrf_dn > 0.0:
            return IFACE_WET_WET
        return IFACE_DRY_DN
    if wdsrf_dn > 0.0:
        return IFACE_DRY_UP
    return IFACE_DRY_DRY


@njit(cache=True)
def wave_speeds(iface, wdsrf_up, wdsrf_dn, veloc_up, veloc_dn, grav):
    """
    Upstream (left) and downstream (right) wave speed estimates

    On a dry side the estimate falls back to the dry-bed front speed of the
    wet side, u -/+ 2*sqrt(g*h).

    Returns:
    --------
    vwave_up, vwave_dn : float
        Wave speeds [m/s]
    """
    cel_up = np.sqrt(grav * wdsrf_up)
    cel_dn = np.sqrt(grav * wdsrf_dn)

    # Two-rarefaction estimate of the star state
    veloc_fc = 0.5 * (veloc_up + veloc_dn) + cel_up - cel_dn
    wdsrf_fc = (0.5 * (cel_up + cel_dn) + 0.25 * (veloc_up - veloc_dn))**2 / grav
    cel_fc = np.sqrt(grav * wdsrf_fc)

    if iface == IFACE_WET_WET:
        vwave_up = min(veloc_up - cel_up, veloc_fc - cel_fc)
        vwave_dn = max(veloc_dn + cel_dn, veloc_fc + cel_fc)
    elif iface == IFACE_DRY_DN:
        vwave_up = min(veloc_up - cel_up, veloc_fc - cel_fc)
        vwave_dn = veloc_up + 2.0 * cel_up
    elif iface == IFACE_DRY_UP:
        vwave_up = veloc_dn - 2.0 * cel_dn
        vwave_dn = max(veloc_dn + cel_dn, veloc_fc + cel_fc)
    else:
        vwave_up = veloc_dn
        vwave_dn = veloc_up

    return vwave_up, vwave_dn


@njit(cache=True)
def riemann_flux(wdsrf_up, wdsrf_dn, veloc_up, veloc_dn, grav):
    """
    Flux per unit interface width for reconstructed interface states

    Parameters:
    -----------
    wdsrf_up, wdsrf_dn : float
        Reconstructed water depth upstream / downstream of the interface [m]
    veloc_up, veloc_dn : float
        Velocity of the upstream / downstream HRU [m/s]
    grav : float
        Gravity acceleration [m/s2]

    Returns:
    --------
    iface : int
        Interface class
    hflux : float
        Volume flux [m2/s], positive downstream
    mflux : float
        Momentum flux including hydrostatic pressure [m3/s2]
    """
    iface = classify_interface(wdsrf_up, wdsrf_dn)
    if iface == IFACE_DRY_DRY:
        return iface, 0.0, 0.0

    vwave_up, vwave_dn = wave_speeds(iface, wdsrf_up, wdsrf_dn, veloc_up, veloc_dn, grav)

    hflux_up = veloc_up * wdsrf_up
    hflux_dn = veloc_dn * wdsrf_dn
    mflux_up = veloc_up**2 * wdsrf_up + 0.5 * grav * wdsrf_up**2
    mflux_dn = veloc_dn**2 * wdsrf_dn + 0.5 * grav * wdsrf_dn**2

    if vwave_up >= 0.0:
        # Supercritical towards downstream
        hflux = hflux_up
        mflux = mflux_up
    elif vwave_dn <= 0.0:
        # Supercritical towards upstream
        hflux = hflux_dn
        mflux = mflux_dn
    else:
        hflux = (vwave_dn * hflux_up - vwave_up * hflux_dn
                 + vwave_up * vwave_dn * (wdsrf_dn - wdsrf_up)) / (vwave_dn - vwave_up)
        mflux = (vwave_dn * mflux_up - vwave_up * mflux_dn
                 + vwave_up * vwave_dn * (hflux_dn - hflux_up)) / (vwave_dn - vwave_up)

    return iface, hflux, mflux


@njit(cache=True)
def calc_interface_fluxes(nhru, order, downstream, flen, hand, pondmin, grav,
                          wdsrf_h, veloc_h, sum_hflux_h, sum_mflux_h, sum_zgrad_h):
    """
    Sum interface fluxes of every HRU in one basin (JIT-compiled)

    Links are swept once, from the far end of the topological order towards
    the outlet. Each link adds its flux to the upstream HRU and subtracts it
    from the downstream HRU, so volume and momentum are exchanged exactly.

    Parameters:
    -----------
    nhru : int
        Number of HRUs in the basin
    order : ndarray (nhru,)
        Topological order, order[0] is the outlet
    downstream : ndarray (nhru,)
        Downstream HRU index
    flen : ndarray (nhru,)
        Interface width [m]
    hand : ndarray (nhru,)
        Height above nearest drainage [m]
    pondmin : float
        Minimum ponding depth [m]
    grav : float
        Gravity acceleration [m/s2]
    wdsrf_h, veloc_h : ndarray
        HRU water depth [m] and velocity [m/s]
    sum_hflux_h : ndarray
        Net volume outflow [m3/s] (output)
    sum_mflux_h : ndarray
        Net momentum flux [m4/s2] (output)
    sum_zgrad_h : ndarray
        Hydrostatic pressure term balancing the bed slope [m4/s2] (output)

    Returns:
    --------
    nactive : int
        Number of links that carried a flux computation
    """
    for i in range(nhru):
        sum_hflux_h[i] = 0.0
        sum_mflux_h[i] = 0.0
        sum_zgrad_h[i] = 0.0

    nactive = 0
    for k in range(nhru - 1, 0, -1):
        i = order[k]
        j = downstream[i]

        if wdsrf_h[i] < pondmin and wdsrf_h[j] < pondmin:
            continue

        wdsrf_up, wdsrf_dn = reconstruct_interface(wdsrf_h[i], wdsrf_h[j], hand[i], hand[j])
        iface, hflux, mflux = riemann_flux(wdsrf_up, wdsrf_dn, veloc_h[i], veloc_h[j], grav)

        hflux_fc = flen[i] * hflux
        mflux_fc = flen[i] * mflux

        sum_hflux_h[i] += hflux_fc
        sum_hflux_h[j] -= hflux_fc

        sum_mflux_h[i] += mflux_fc
        sum_mflux_h[j] -= mflux_fc

        sum_zgrad_h[i] += flen[i] * 0.5 * grav * wdsrf_up**2
        sum_zgrad_h[j] -= flen[i] * 0.5 * grav * wdsrf_dn**2

        nactive += 1

    return nactive

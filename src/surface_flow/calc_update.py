"""
State update of hillslope surface flow over one sub-step
"""
from numba import njit


@njit(cache=True)
def update_state(nhru, outlet, is_source, ihru, dt_this, area, pondmin, grav, nmanning,
                 wdsrf_h, veloc_h, momtm_h, rsurf_h, sum_mflux_h, sum_zgrad_h,
                 wdsrf_hru_ta, momtm_hru_ta):
    """
    Advance depth and momentum of every HRU by dt_this (JIT-compiled)

    Depth follows the net outflow rate and is floored at zero. Momentum is
    updated semi-implicitly with Manning friction. HRUs shallower than
    pondmin are snapped to rest. Outlet momentum stays <= 0, source momentum
    stays >= 0.

    Time accumulators (worker-wide, indexed through ihru) are incremented by
    value * dt_this.
    """
    for i in range(nhru):
        wdsrf_h[i] = max(0.0, wdsrf_h[i] - rsurf_h[i] * dt_this)

        if wdsrf_h[i] < pondmin:
            momtm_h[i] = 0.0
            veloc_h[i] = 0.0
        else:
            friction = grav * nmanning**2 * abs(momtm_h[i]) / wdsrf_h[i]**(7.0 / 3.0)
            momtm_h[i] = ((momtm_h[i] - (sum_mflux_h[i] - sum_zgrad_h[i]) / area[i] * dt_this)
                          / (1.0 + friction * dt_this))
            veloc_h[i] = momtm_h[i] / wdsrf_h[i]

            if i == outlet:
                veloc_h[i] = min(veloc_h[i], 0.0)
                momtm_h[i] = min(momtm_h[i], 0.0)

            if is_source[i]:
                veloc_h[i] = max(veloc_h[i], 0.0)
                momtm_h[i] = max(momtm_h[i], 0.0)

        wdsrf_hru_ta[ihru[i]] += wdsrf_h[i] * dt_this
        momtm_hru_ta[ihru[i]] += momtm_h[i] * dt_this

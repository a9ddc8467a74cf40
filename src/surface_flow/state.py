"""
Per-worker surface water state

Owned by the surrounding model; the routing core reads and mutates it in
place during each call.
"""
import numpy as np


class SurfaceFlowState:
    """
    Surface water state arrays

    Attributes:
    -----------
    wdsrf : ndarray (npatch,)
        Patch ponding depth [mm]
    wdsrf_hru : ndarray (nhru,)
        HRU depth at the end of the last call [m]
    veloc_hru : ndarray (nhru,)
        HRU velocity at the end of the last call [m/s]
    wdsrf_hru_ta : ndarray (nhru,)
        Time integral of HRU depth [m s]
    momtm_hru_ta : ndarray (nhru,)
        Time integral of HRU momentum [m2]
    """

    def __init__(self, npatch, nhru):
        self.wdsrf = np.zeros(npatch, dtype=np.float64)
        self.wdsrf_hru = np.zeros(nhru, dtype=np.float64)
        self.veloc_hru = np.zeros(nhru, dtype=np.float64)
        self.wdsrf_hru_ta = np.zeros(nhru, dtype=np.float64)
        self.momtm_hru_ta = np.zeros(nhru, dtype=np.float64)

    @classmethod
    def from_network(cls, network):
        return cls(network.npatch, network.nhru)

    @property
    def npatch(self):
        return len(self.wdsrf)

    @property
    def nhru(self):
        return len(self.wdsrf_hru)

    def set_uniform_depth(self, network, wdsrf_mm):
        """
        Set every patch to the same ponding depth [mm] and the HRU state to rest

        HRU depth is set consistently with the patches, so the first call
        sees no depth change.
        """
        self.wdsrf[:] = wdsrf_mm
        self.veloc_hru[:] = 0.0
        for basin in network.basins:
            for i in range(basin.nhru):
                subfrc = network.patch_frac[basin.patch_start[i]:basin.patch_end[i]]
                self.wdsrf_hru[basin.ihru[i]] = wdsrf_mm * np.sum(subfrc) / 1.0e3

    def add_ponding(self, network, dwdsrf_mm):
        """
        Add the same ponding depth [mm] to every patch

        Returns:
        --------
        float : volume added over all basins [m3]
        """
        volume_before = self.total_volume(network)
        self.wdsrf += dwdsrf_mm
        return self.total_volume(network) - volume_before

    def reset_accumulators(self):
        """Zero the time accumulators (done by the caller after output)"""
        self.wdsrf_hru_ta[:] = 0.0
        self.momtm_hru_ta[:] = 0.0

    def basin_volume(self, network, basin):
        """Water volume of one basin from patch depth [m3]"""
        volume = 0.0
        frac = network.patch_frac
        for i in range(basin.nhru):
            istt = basin.patch_start[i]
            iend = basin.patch_end[i]
            volume += np.sum(self.wdsrf[istt:iend] * frac[istt:iend]) / 1.0e3 * basin.area[i]
        return volume

    def total_volume(self, network):
        """Water volume of all basins [m3]"""
        return sum(self.basin_volume(network, basin) for basin in network.basins)

    def get_state(self):
        """Return state arrays as dictionary"""
        return {
            'wdsrf': self.wdsrf,
            'wdsrf_hru': self.wdsrf_hru,
            'veloc_hru': self.veloc_hru,
            'wdsrf_hru_ta': self.wdsrf_hru_ta,
            'momtm_hru_ta': self.momtm_hru_ta,
        }

    def __repr__(self):
        return f"SurfaceFlowState(npatch={self.npatch}, nhru={self.nhru})"

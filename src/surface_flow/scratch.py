"""
Reusable working buffers for per-basin routing
"""
import numpy as np


class ScratchArena:
    """
    Per-worker scratch buffers sized to the largest basin

    Kernels receive the full buffers together with the basin size nhru and
    only touch the first nhru entries.
    """

    NAMES = ('wdsrf_h', 'veloc_h', 'momtm_h',
             'sum_hflux_h', 'sum_mflux_h', 'sum_zgrad_h', 'rsurf_h')

    def __init__(self, nhru_max):
        self.size = 0
        self.ensure(max(int(nhru_max), 1))

    def ensure(self, nhru):
        """Grow buffers to hold at least nhru HRUs"""
        if nhru <= self.size:
            return
        for name in self.NAMES:
            setattr(self, name, np.zeros(nhru, dtype=np.float64))
        self.size = nhru

    def __repr__(self):
        return f"ScratchArena(size={self.size})"

"""
Diagnostic module for hillslope surface flow
Manages output-interval averages, sub-step statistics and mass balance

Implements two levels of diagnostics:
1. Sub-step statistics: collected per basin and per call from route_basin
2. Output diagnostics (_out): accumulated for output intervals
"""
import numpy as np

from .calc_substep import SUBSTEP_NAMES


class DiagnosticManager:
    """
    Manage diagnostic variables (averages and maximums) for surface flow
    """

    def __init__(self, nhru):
        """
        Initialize diagnostic manager

        Parameters:
        -----------
        nhru : int
            Number of worker-wide HRUs
        """
        self.nhru = nhru

        self._initialize_substep_stats()
        self._initialize_out_diagnostics()

        self.volume_start = 0.0

    def _initialize_substep_stats(self):
        """Initialize sub-step statistics"""
        self.ncall_basin = 0
        self.nsubstep = 0
        self.nsubstep_max = 0
        self.dt_min = np.inf
        self.nbind = np.zeros(len(SUBSTEP_NAMES), dtype=np.int64)
        self.nfallback = 0

    def _initialize_out_diagnostics(self):
        """Initialize output diagnostic variables"""
        # Time accumulator for output
        self.nadd_out = 0.0  # Accumulated time [seconds]

        self.wdsrf_out_avg = np.zeros(self.nhru, dtype=np.float64)
        self.momtm_out_avg = np.zeros(self.nhru, dtype=np.float64)
        self.wdsrf_out_max = np.zeros(self.nhru, dtype=np.float64)

    def record_basin(self, info):
        """
        Record sub-step statistics of one routed basin

        Parameters:
        -----------
        info : dict
            Returned by SurfaceFlowPhysics.route_basin
        """
        self.ncall_basin += 1
        self.nsubstep += info['nsubstep']
        self.nsubstep_max = max(self.nsubstep_max, info['nsubstep'])
        if info['nsubstep'] > 0:
            self.dt_min = min(self.dt_min, info['dt_min'])
        self.nbind += info['nbind']
        self.nfallback += info['nfallback']

    def accumulate_step(self, state, dt):
        """
        Accumulate output diagnostics after one call

        Parameters:
        -----------
        state : SurfaceFlowState
            State holding the time accumulators of this call
        dt : float
            Length of the call [seconds]
        """
        self.nadd_out += dt

        # Time-averaged values of this call
        wdsrf_avg = state.wdsrf_hru_ta / dt
        momtm_avg = state.momtm_hru_ta / dt

        self.wdsrf_out_avg += wdsrf_avg * dt
        self.momtm_out_avg += momtm_avg * dt

        self.wdsrf_out_max = np.maximum(self.wdsrf_out_max, state.wdsrf_hru)

    def finalize_out(self):
        """Calculate time-averaged values for output period"""
        if self.nadd_out > 0:
            self.wdsrf_out_avg /= self.nadd_out
            self.momtm_out_avg /= self.nadd_out

    def reset_out(self):
        """Reset output diagnostic variables and sub-step statistics"""
        self.nadd_out = 0.0
        self.wdsrf_out_avg[:] = 0.0
        self.momtm_out_avg[:] = 0.0
        self.wdsrf_out_max[:] = 0.0

        self._initialize_substep_stats()

    def get_output_diagnostics(self):
        """
        Get output diagnostic variables

        Returns:
        --------
        dict : Output diagnostic variables
        """
        # Mean velocity from mean momentum where the HRU was wet on average
        veloc_avg = np.zeros(self.nhru, dtype=np.float64)
        wet = self.wdsrf_out_avg > 0.0
        veloc_avg[wet] = self.momtm_out_avg[wet] / self.wdsrf_out_avg[wet]

        return {
            'wdsrf_avg': self.wdsrf_out_avg.copy(),
            'momtm_avg': self.momtm_out_avg.copy(),
            'veloc_avg': veloc_avg,
            'wdsrf_max': self.wdsrf_out_max.copy(),
            'nsubstep': self.nsubstep,
            'nsubstep_max': self.nsubstep_max,
            'dt_min': self.dt_min,
            'nbind': dict(zip(SUBSTEP_NAMES, self.nbind.tolist())),
            'nfallback': self.nfallback,
        }

    def begin_mass_check(self, network, state):
        """Store the water volume at the start of the check period [m3]"""
        self.volume_start = state.total_volume(network)
        return self.volume_start

    def end_mass_check(self, network, state, volume_added=0.0):
        """
        Relative volume error since begin_mass_check

        Parameters:
        -----------
        volume_added : float
            Water added to the patches by the caller in the meantime [m3]

        Returns:
        --------
        float : (end - start - added) / (start + added)
        """
        volume_end = state.total_volume(network)
        volume_ref = self.volume_start + volume_added
        if volume_ref <= 0.0:
            return 0.0 if volume_end == 0.0 else np.inf
        return (volume_end - volume_ref) / volume_ref

    def print_substep_summary(self):
        """Print sub-step statistics of the current output period"""
        if self.ncall_basin == 0:
            return
        print(f"    Sub-steps: {self.nsubstep} over {self.ncall_basin} basin calls "
              f"(max {self.nsubstep_max}, min dt {self.dt_min:.3f} s)")
        bind = ", ".join(f"{name}={n}" for name, n in zip(SUBSTEP_NAMES, self.nbind))
        print(f"    Binding constraint: {bind}")
        if self.nfallback > 0:
            print(f"    WARNING: {self.nfallback} zero-length sub-step fallback(s)")

"""
Physics module for hillslope surface flow
Routes ponded surface water between HRUs of each basin

Implements a Godunov-type finite volume scheme for the 1D shallow water
equations on the HRU network of each basin:
- calc_aggregate: patch -> HRU depth, momentum reconstruction, HRU -> patch
- calc_hflux: HLL interface fluxes with hydrostatic reconstruction
- calc_substep: adaptive sub-step (CFL, positivity, flow reversal)
- calc_update: depth and semi-implicit Manning momentum update
"""
import numpy as np

from .calc_aggregate import (
    aggregate_patch_depth,
    reconstruct_momentum,
    store_hru_state,
    disaggregate_hru_depth,
)
from .calc_hflux import (
    calc_interface_fluxes,
    classify_interface,
    reconstruct_interface,
    IFACE_DRY_DRY,
    IFACE_NAMES,
)
from .calc_substep import calc_substep, SUBSTEP_NONE, SUBSTEP_NAMES
from .calc_update import update_state
from .scratch import ScratchArena
from .state import SurfaceFlowState
from .trace_debug import HruTracer


class SurfaceFlowPhysics:
    """Hillslope surface flow routing for all basins of one worker"""

    def __init__(self, nml, network, state=None):
        """
        Initialize physics module

        Parameters:
        -----------
        nml : Namelist object
            Namelist configuration
        network : SurfaceNetwork
            Basin topology and patch fractions (read-only)
        state : SurfaceFlowState, optional
            Shared surface water state (default: new zero state)
        """
        self.nml = nml
        self.network = network
        self.state = state if state is not None else SurfaceFlowState.from_network(network)

        if self.state.npatch != network.npatch or self.state.nhru != network.nhru:
            raise ValueError(
                f"State size (npatch={self.state.npatch}, nhru={self.state.nhru}) does not "
                f"match network (npatch={network.npatch}, nhru={network.nhru})")

        self._read_physics_config()

        self.scratch = ScratchArena(network.nhru_max)
        self.ncall = 0

        # A disabled tracer when ltrace is off
        self.tracer = HruTracer(self.trace_hrus if self.ltrace else [])

    def _read_physics_config(self):
        """Read physics configuration from namelist"""
        # Physical parameters
        self.pondmin = float(self.nml.get('SURFACE_FLOW', 'pondmin', 1.0e-4))            # Minimum ponding depth [m]
        self.nmanning = float(self.nml.get('SURFACE_FLOW', 'nmanning_hslp', 0.3))        # Manning coeff hillslope
        self.grav = float(self.nml.get('SURFACE_FLOW', 'grav', 9.80616))                 # Gravity [m/s2]
        self.pcfl = float(self.nml.get('SURFACE_FLOW', 'pcfl', 0.8))                     # CFL factor
        self.pvelrev = float(self.nml.get('SURFACE_FLOW', 'pvelrev', 0.1))               # Reversal check speed [m/s]
        self.pdstfac = float(self.nml.get('SURFACE_FLOW', 'pdstfac', 1.0))               # Downstream blending factor

        # Debugging
        self.ldebug = self.nml.get('SURFACE_FLOW', 'ldebug', False)               # Validate state after each call
        self.ltrace = self.nml.get('SURFACE_FLOW', 'ltrace', False)               # Enable HRU tracing
        trace_hrus = self.nml.get('SURFACE_FLOW', 'trace_hrus', [])
        self.trace_hrus = trace_hrus if isinstance(trace_hrus, list) else [trace_hrus]
        self.ctrace = self.nml.get('SURFACE_FLOW', 'ctrace', './surface_flow_trace.txt')

    def surface_flow(self, dt, diagnostic=None):
        """
        Route surface water of every basin over one outer time step

        Patch depth, HRU velocity and the time accumulators of self.state are
        updated in place. The accumulators are only incremented.

        Parameters:
        -----------
        dt : float
            Outer time step [seconds]
        diagnostic : DiagnosticManager, optional
            Receives the sub-step statistics of each basin

        Returns:
        --------
        list of dict : sub-step statistics of each basin
        """
        if not dt > 0.0:
            raise ValueError(f"Time step must be positive, got {dt}")

        self.ncall += 1
        self.tracer.set_timestep(self.ncall)

        infos = []
        for basin in self.network.basins:
            info = self.route_basin(basin, dt)
            if diagnostic is not None:
                diagnostic.record_basin(info)
            infos.append(info)

        if self.ldebug:
            from .utils import validate_physics_state
            validate_physics_state(self, step_num=self.ncall, raise_error=True, verbose=False)

        return infos

    def route_basin(self, basin, dt):
        """
        Route surface water of one basin over dt

        Parameters:
        -----------
        basin : BasinTopology
            Basin to route
        dt : float
            Outer time step [seconds]

        Returns:
        --------
        dict : basin_id, nsubstep, dt_sum, dt_min, nbind (per constraint), nfallback
        """
        state = self.state
        nhru = basin.nhru

        info = {
            'basin_id': basin.basin_id,
            'nsubstep': 0,
            'dt_sum': 0.0,
            'dt_min': dt,
            'nbind': np.zeros(len(SUBSTEP_NAMES), dtype=np.int64),
            'nfallback': 0,
        }

        if nhru <= 1:
            # No lateral neighbour: depth follows the patches, water is at rest
            ihru = basin.ihru[0]
            istt = basin.patch_start[0]
            iend = basin.patch_end[0]
            wdsrf = np.sum(state.wdsrf[istt:iend] * self.network.patch_frac[istt:iend]) / 1.0e3

            state.wdsrf_hru[ihru] = wdsrf
            state.veloc_hru[ihru] = 0.0
            state.wdsrf_hru_ta[ihru] += wdsrf * dt
            info['dt_sum'] = dt
            return info

        sc = self.scratch
        sc.ensure(nhru)

        # Patch to HRU
        aggregate_patch_depth(nhru, basin.patch_start, basin.patch_end, self.network.patch_frac,
                              state.wdsrf, sc.wdsrf_h)
        reconstruct_momentum(nhru, basin.ihru, state.wdsrf_hru, state.veloc_hru,
                             sc.wdsrf_h, sc.veloc_h, sc.momtm_h)

        traced = self.tracer.select(basin)
        for i, ihru in traced:
            self.tracer.trace(ihru, 'aggregate', wdsrf=sc.wdsrf_h[i], veloc=sc.veloc_h[i],
                              momtm=sc.momtm_h[i])

        outlet = basin.outlet
        dt_res = dt
        while dt_res > 0.0:
            calc_interface_fluxes(nhru, basin.order, basin.downstream, basin.flen, basin.hand,
                                  self.pondmin, self.grav,
                                  sc.wdsrf_h, sc.veloc_h,
                                  sc.sum_hflux_h, sc.sum_mflux_h, sc.sum_zgrad_h)

            if traced:
                self._trace_interfaces(basin, traced, info['nsubstep'] + 1)

            dt_this, binding, ibind = calc_substep(
                nhru, outlet, dt_res, basin.plen, basin.area,
                self.grav, self.pcfl, self.pvelrev, self.pdstfac,
                sc.wdsrf_h, sc.veloc_h, sc.momtm_h,
                sc.sum_hflux_h, sc.sum_mflux_h, sc.sum_zgrad_h, sc.rsurf_h)

            if not (dt_this > 0.0 and np.isfinite(dt_this)):
                # Degenerate step: consume the remaining time without exchange
                print(f"  WARNING: basin {basin.basin_id}: sub-step {dt_this} at HRU {ibind} "
                      f"({SUBSTEP_NAMES[binding]}), skipping remaining {dt_res:.3f} s")
                sc.sum_hflux_h[:nhru] = 0.0
                sc.sum_mflux_h[:nhru] = 0.0
                sc.sum_zgrad_h[:nhru] = 0.0
                sc.rsurf_h[:nhru] = 0.0
                dt_this = dt_res
                binding = SUBSTEP_NONE
                info['nfallback'] += 1

            update_state(nhru, outlet, basin.is_source, basin.ihru, dt_this, basin.area,
                         self.pondmin, self.grav, self.nmanning,
                         sc.wdsrf_h, sc.veloc_h, sc.momtm_h, sc.rsurf_h,
                         sc.sum_mflux_h, sc.sum_zgrad_h,
                         state.wdsrf_hru_ta, state.momtm_hru_ta)

            info['nsubstep'] += 1
            info['dt_sum'] += dt_this
            info['dt_min'] = min(info['dt_min'], dt_this)
            info['nbind'][binding] += 1

            if traced:
                self.tracer.set_timestep(self.ncall, info['nsubstep'])
                for i, ihru in traced:
                    self.tracer.trace(ihru, 'substep', dt_this=dt_this,
                                      binding=SUBSTEP_NAMES[binding], bound_here=(ibind == i),
                                      sum_hflux=sc.sum_hflux_h[i], sum_mflux=sc.sum_mflux_h[i],
                                      sum_zgrad=sc.sum_zgrad_h[i], rsurf=sc.rsurf_h[i],
                                      wdsrf=sc.wdsrf_h[i], veloc=sc.veloc_h[i],
                                      momtm=sc.momtm_h[i])

            dt_res = dt_res - dt_this

        # Save HRU state, then HRU to patch
        store_hru_state(nhru, basin.ihru, sc.wdsrf_h, sc.veloc_h, state.wdsrf_hru, state.veloc_hru)
        disaggregate_hru_depth(nhru, basin.patch_start, basin.patch_end, sc.wdsrf_h, state.wdsrf)

        return info

    def _trace_interfaces(self, basin, traced, isubstep):
        """Record the wet/dry class of the downstream interface of traced HRUs"""
        sc = self.scratch
        self.tracer.set_timestep(self.ncall, isubstep)
        for i, ihru in traced:
            j = basin.downstream[i]
            if j < 0:
                continue
            if sc.wdsrf_h[i] < self.pondmin and sc.wdsrf_h[j] < self.pondmin:
                iface = IFACE_DRY_DRY
            else:
                wdsrf_up, wdsrf_dn = reconstruct_interface(sc.wdsrf_h[i], sc.wdsrf_h[j],
                                                           basin.hand[i], basin.hand[j])
                iface = classify_interface(wdsrf_up, wdsrf_dn)
            self.tracer.trace(ihru, 'interface', iface=IFACE_NAMES[iface],
                              sum_hflux=sc.sum_hflux_h[i], sum_mflux=sc.sum_mflux_h[i])

    def save_trace(self):
        """Write the HRU trace to ctrace (when tracing is enabled)"""
        if self.ltrace:
            self.tracer.save_to_file(self.ctrace)
            self.tracer.print_summary()

    def get_state(self):
        """Return state arrays as dictionary"""
        return self.state.get_state()

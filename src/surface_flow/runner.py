"""
Stand-alone driver for hillslope surface flow
Loads a surface network, then calls the routing core once per outer step
"""
import time as pytime

from surface_network import read_surface_network, validate_network

from .time_control import TimeControl
from .physics import SurfaceFlowPhysics
from .state import SurfaceFlowState
from .diagnostic import DiagnosticManager
from .utils import print_state_summary


class SurfaceFlowRunner:
    """
    Surface flow model runner

    The surrounding land model is reduced to a constant ponding input added
    to every patch before each call; the runner also plays the caller's part
    of resetting the time accumulators after each call.
    """

    def __init__(self, nml, cnetwork=None):
        """
        Initialize surface flow model runner

        Parameters:
        -----------
        nml : Namelist object
            Namelist configuration
        cnetwork : str, optional
            Network file, overrides MODEL_RUN cnetwork
        """
        self.nml = nml
        self.cnetwork = cnetwork

        # Model components
        self.network = None
        self.state = None
        self.physics = None
        self.time_control = None
        self.diagnostic = None

        self.volume_added = 0.0
        self.mass_error = None

        print("=" * 70)
        print("Hillslope Surface Flow Runner Initialization")
        print("=" * 70)

    def initialize(self):
        """Initialize model"""
        print("\n1. Reading model configuration...")
        self._read_configuration()

        print("\n2. Loading surface network...")
        self.network = read_surface_network(self.cnetwork)

        if self.lvalidate:
            print("\n3. Validating surface network...")
            validate_network(self.network)
        else:
            print("\n3. Skipping network validation")

        print("\n4. Initializing time control...")
        self.time_control = TimeControl(self.syear, self.smon, self.sday, self.shour,
                                        self.eyear, self.emon, self.eday, self.ehour, self.dt)
        print(f"  Start: {self.time_control.start_time}")
        print(f"  End:   {self.time_control.end_time}")
        print(f"  Total steps: {self.time_control.nsteps}")

        print("\n5. Initializing physics...")
        self.state = SurfaceFlowState.from_network(self.network)
        self.state.set_uniform_depth(self.network, self.wdsrf_init)
        self.physics = SurfaceFlowPhysics(self.nml, self.network, self.state)
        print(f"  Initial ponding: {self.wdsrf_init} mm")
        print(f"  Manning coefficient: {self.physics.nmanning}")
        print(f"  Minimum ponding depth: {self.physics.pondmin} m")

        print("\n6. Initializing diagnostics...")
        self.diagnostic = DiagnosticManager(self.network.nhru)
        volume = self.diagnostic.begin_mass_check(self.network, self.state)
        print(f"  Initial water volume: {volume:.6e} m3")

        print("\n" + "=" * 70)
        print("Initialization Complete")
        print("=" * 70)

    def _read_configuration(self):
        """Read model configuration from namelist"""
        if self.cnetwork is None:
            self.cnetwork = self.nml.get('MODEL_RUN', 'cnetwork', './surface_network.nc')

        self.syear = self.nml.get('MODEL_RUN', 'syear', 2000)
        self.smon = self.nml.get('MODEL_RUN', 'smon', 1)
        self.sday = self.nml.get('MODEL_RUN', 'sday', 1)
        self.shour = self.nml.get('MODEL_RUN', 'shour', 0)

        self.eyear = self.nml.get('MODEL_RUN', 'eyear', 2000)
        self.emon = self.nml.get('MODEL_RUN', 'emon', 1)
        self.eday = self.nml.get('MODEL_RUN', 'eday', 2)
        self.ehour = self.nml.get('MODEL_RUN', 'ehour', 0)

        self.dt = float(self.nml.get('MODEL_RUN', 'dt', 1800.0))                # Outer time step [s]
        self.wdsrf_init = float(self.nml.get('MODEL_RUN', 'wdsrf_init', 0.0))   # Initial ponding [mm]
        self.qsurf_in = float(self.nml.get('MODEL_RUN', 'qsurf_in', 0.0))       # Ponding input [mm/h]
        self.ifrq_out = self.nml.get('MODEL_RUN', 'ifrq_out', 24)               # Summary frequency [h]
        self.lvalidate = self.nml.get('MODEL_RUN', 'lvalidate', True)

        print(f"  Network file: {self.cnetwork}")
        print(f"  Simulation period: {self.syear}/{self.smon:02d}/{self.sday:02d} {self.shour:02d}:00 "
              f"to {self.eyear}/{self.emon:02d}/{self.eday:02d} {self.ehour:02d}:00")
        print(f"  Time step: {self.dt} seconds")
        print(f"  Ponding input: {self.qsurf_in} mm/h")

    def run(self):
        """Main model run loop"""
        print("\n" + "=" * 70)
        print("Starting Model Simulation")
        print("=" * 70)

        start_wall_time = pytime.time()
        dwdsrf = self.qsurf_in * self.dt / 3600.0

        istep = 0
        while not self.time_control.is_finished():
            self.time_control.time_next()

            if dwdsrf > 0.0:
                self.volume_added += self.state.add_ponding(self.network, dwdsrf)

            self.physics.surface_flow(self.dt, self.diagnostic)

            # Caller side: collect accumulators, then reset them
            self.diagnostic.accumulate_step(self.state, self.dt)
            self.state.reset_accumulators()

            if self.time_control.is_output_time(self.ifrq_out):
                self.diagnostic.finalize_out()
                self._print_output_summary(self.diagnostic.get_output_diagnostics())
                self.diagnostic.reset_out()

            if istep % max(1, self.time_control.nsteps // 20) == 0:
                progress = self.time_control.get_progress()
                elapsed = pytime.time() - start_wall_time
                print(f"  {self.time_control} | Progress: {progress:5.1f}% | "
                      f"Elapsed: {elapsed:.1f}s")

            istep += 1

        elapsed_time = pytime.time() - start_wall_time

        print("\n" + "=" * 70)
        print("Simulation Complete")
        print("=" * 70)
        print(f"Total steps: {istep}")
        print(f"Wall clock time: {elapsed_time:.2f} seconds")
        if istep > 0:
            print(f"Time per step: {elapsed_time / istep * 1000:.2f} ms")

    def _print_output_summary(self, diag):
        """Print output-interval diagnostics"""
        print(f"  Output at {self.time_control.current_time}:")
        print(f"    Mean depth: {diag['wdsrf_avg'].mean():.6e} m, "
              f"max depth: {diag['wdsrf_max'].max():.6e} m")
        self.diagnostic.print_substep_summary()

    def finalize(self):
        """Finalize model run"""
        print("\n" + "=" * 70)
        print("Finalizing Model")
        print("=" * 70)

        self.mass_error = self.diagnostic.end_mass_check(self.network, self.state, self.volume_added)
        print(f"  Water added: {self.volume_added:.6e} m3")
        print(f"  Final water volume: {self.state.total_volume(self.network):.6e} m3")
        print(f"  Relative mass balance error: {self.mass_error:.3e}")

        print_state_summary(self.physics.get_state())
        self.physics.save_trace()

        print("Model finalization complete")


def run_surface_flow_model(nml, cnetwork=None):
    """
    Convenience function to run the surface flow model

    Parameters:
    -----------
    nml : Namelist object
        Namelist configuration
    cnetwork : str, optional
        Network file, overrides MODEL_RUN cnetwork

    Returns:
    --------
    success : bool
        True if simulation completed successfully
    """
    try:
        runner = SurfaceFlowRunner(nml, cnetwork)
        runner.initialize()
        runner.run()
        runner.finalize()
        return True

    except Exception as e:
        print(f"\nERROR in model run: {e}")
        import traceback
        traceback.print_exc()
        return False

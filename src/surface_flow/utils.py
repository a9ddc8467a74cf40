"""
State checks for hillslope surface flow

Used after each call when ldebug is on, and by the driver's state summary.
"""
import sys
import numpy as np


def _fail(msg, raise_error, verbose):
    if raise_error:
        raise ValueError(msg)
    if verbose:
        print(f"WARNING: {msg}", file=sys.stderr)
    return False


def check_nan(array, name, raise_error=True, verbose=True):
    """
    Check array for NaN values

    Parameters:
    -----------
    array : ndarray
        Array to check
    name : str
        Name of the array for error messages
    raise_error : bool
        If True, raise ValueError when NaN is found
        If False, just print warning and return False
    verbose : bool
        If True, print diagnostic information

    Returns:
    --------
    bool : True if no NaN found, False if NaN found
    """
    mask = np.isnan(array)
    if not np.any(mask):
        return True

    idx = np.where(mask)[0]
    msg = (f"NaN detected in {name}:\n"
           f"  Total NaN values: {int(np.sum(mask))}\n"
           f"  First few NaN indices: {idx[:5]}")
    return _fail(msg, raise_error, verbose)


def check_inf(array, name, raise_error=True, verbose=True):
    """Check array for Inf values, see check_nan"""
    mask = np.isinf(array)
    if not np.any(mask):
        return True

    idx = np.where(mask)[0]
    msg = (f"Inf detected in {name}:\n"
           f"  Total Inf values: {int(np.sum(mask))}\n"
           f"  Positive Inf: {int(np.sum(np.isposinf(array)))}\n"
           f"  First few Inf indices: {idx[:5]}")
    return _fail(msg, raise_error, verbose)


def check_negative(array, name, raise_error=True, verbose=True):
    """Check array for negative values (for variables that should be non-negative)"""
    mask = array < 0
    if not np.any(mask):
        return True

    idx = np.where(mask)[0]
    msg = (f"Negative values detected in {name}:\n"
           f"  Total negative values: {int(np.sum(mask))}\n"
           f"  Minimum value: {np.min(array):.6e}\n"
           f"  First few negative indices: {idx[:5]}")
    return _fail(msg, raise_error, verbose)


# Variables that must never be negative
NON_NEGATIVE_VARS = ('wdsrf', 'wdsrf_hru', 'wdsrf_hru_ta')


def check_state_valid(state, raise_error=True, verbose=True):
    """
    Validate surface flow state variables

    Parameters:
    -----------
    state : dict
        Dictionary of state variables (SurfaceFlowState.get_state())
    raise_error : bool
        If True, raise error on first validation failure
        If False, check all variables and print warnings
    verbose : bool
        Print diagnostic information

    Returns:
    --------
    bool : True if all checks pass
    """
    all_valid = True
    for varname, array in state.items():
        all_valid = check_nan(array, varname, raise_error, verbose) and all_valid
        all_valid = check_inf(array, varname, raise_error, verbose) and all_valid
        if varname in NON_NEGATIVE_VARS:
            all_valid = check_negative(array, varname, raise_error, verbose) and all_valid

    return all_valid


def check_boundary_state(network, state, pondmin, raise_error=True, verbose=True):
    """
    Check per-basin boundary conditions on HRU velocity

    - dry HRUs (depth < pondmin) are at rest
    - outlet velocity is never positive
    - source velocity is never negative

    Single-HRU basins are skipped (their velocity is always zero).
    """
    all_valid = True
    for basin in network.basins:
        if basin.nhru <= 1:
            continue

        wdsrf_h = state.wdsrf_hru[basin.ihru]
        veloc_h = state.veloc_hru[basin.ihru]

        moving = np.where((wdsrf_h < pondmin) & (veloc_h != 0.0))[0]
        if len(moving) > 0:
            all_valid = _fail(f"Basin {basin.basin_id}: dry HRU(s) {moving[:5].tolist()} have nonzero velocity",
                              raise_error, verbose) and all_valid

        if veloc_h[basin.outlet] > 0.0:
            all_valid = _fail(f"Basin {basin.basin_id}: outlet velocity {veloc_h[basin.outlet]:.6e} > 0",
                              raise_error, verbose) and all_valid

        back = np.where(basin.is_source & (veloc_h < 0.0))[0]
        if len(back) > 0:
            all_valid = _fail(f"Basin {basin.basin_id}: source HRU(s) {back[:5].tolist()} flow upstream",
                              raise_error, verbose) and all_valid

    return all_valid


def print_state_summary(state):
    """
    Print summary statistics for state variables

    Parameters:
    -----------
    state : dict
        Dictionary of state variables
    """
    print("\n" + "=" * 70)
    print("STATE SUMMARY")
    print("=" * 70)

    for varname, array in sorted(state.items()):
        if array.size == 0:
            continue

        print(f"\n{varname}:")
        print(f"  Min:  {np.min(array):12.4e}    Max:  {np.max(array):12.4e}")
        print(f"  Mean: {np.mean(array):12.4e}    Std:  {np.std(array):12.4e}")

        nan_count = int(np.sum(np.isnan(array)))
        if nan_count > 0:
            print(f"  WARNING: {nan_count} NaN values")

    print("=" * 70)


def validate_physics_state(physics, step_num=None, raise_error=True, verbose=False):
    """
    Validate physics state (convenience wrapper)

    Parameters:
    -----------
    physics : SurfaceFlowPhysics
        Physics instance
    step_num : int (optional)
        Call number for diagnostic message
    raise_error : bool
        Raise error if validation fails
    verbose : bool
        Print detailed diagnostic information

    Returns:
    --------
    bool : True if valid
    """
    if step_num is not None and verbose:
        print(f"\nValidating state at step {step_num}...")

    valid = check_state_valid(physics.get_state(), raise_error=raise_error, verbose=verbose)
    valid = check_boundary_state(physics.network, physics.state, physics.pondmin,
                                 raise_error=raise_error, verbose=verbose) and valid
    return valid

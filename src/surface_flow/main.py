#!/usr/bin/env python3
"""
Hillslope Surface Flow - Main Entry Point

All configuration is done through a namelist file:
  &SURFACE_FLOW  physical constants and debugging options
  &MODEL_RUN     network file, simulation period, time step, ponding input
"""
import sys
import argparse

from surface_network import Namelist, read_surface_network, validate_network, ValidationError
from surface_flow.runner import run_surface_flow_model


def print_banner():
    """Print program banner"""
    print("=" * 70)
    print("Hillslope Surface Flow")
    print("Shallow water routing of ponded water between HRUs")
    print("=" * 70)


def run_validation(cnetwork):
    """Load and validate a network file only"""
    try:
        network = read_surface_network(cnetwork)
        validator = validate_network(network)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        print(f"\n✗ ERROR: {e}")
        return False

    if validator.warnings:
        print(f"\n{len(validator.warnings)} warning(s), see above")
    return True


def main(argv=None):
    """Main program"""
    parser = argparse.ArgumentParser(
        description='Hillslope surface flow routing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Usage examples:
  # Run the model
  surface-flow nml/surface_flow.nml

  # Run on another network file
  surface-flow nml/surface_flow.nml --network data/basin.nc

  # Check the network file only
  surface-flow nml/surface_flow.nml --validate-only
        """
    )

    parser.add_argument('namelist', help='Namelist file path')
    parser.add_argument('--network', default=None,
                        help='Network netCDF file (overrides MODEL_RUN cnetwork)')
    parser.add_argument('--validate-only', action='store_true',
                        help='Load and validate the network, do not run')

    args = parser.parse_args(argv)

    print_banner()

    print(f"\nReading configuration file: {args.namelist}")
    try:
        nml = Namelist(args.namelist)
    except (OSError, ValueError) as e:
        print(f"ERROR: Failed to read configuration file: {e}")
        return 1

    if args.validate_only:
        cnetwork = args.network or nml.get('MODEL_RUN', 'cnetwork', './surface_network.nc')
        success = run_validation(cnetwork)
    else:
        success = run_surface_flow_model(nml, args.network)

    print("\n" + "=" * 70)
    if success:
        print("✓ Completed successfully!")
    else:
        print("✗ Failed, please check the error messages above.")
    print("=" * 70)
    return 0 if success else 1


if __name__ == '__main__':
    sys.exit(main())

#!/usr/bin/env python3
"""
Load-time validation of the hillslope surface network

Checks every basin once, before any routing, so that the sub-stepping loop
never has to re-validate topology or geometry. Errors are collected and
reported together; warnings do not stop the run.
"""
import numpy as np


class ValidationError(Exception):
    """Custom exception for validation errors"""
    pass


class NetworkValidator:
    """Validates a SurfaceNetwork before routing"""

    def __init__(self, network, frac_tol=1.0e-6):
        """
        Initialize validator with network

        Args:
            network: SurfaceNetwork object to check
            frac_tol: Tolerance on the sum of patch fractions of one HRU
        """
        self.network = network
        self.frac_tol = frac_tol
        self.errors = []
        self.warnings = []

    def validate(self, verbose=True):
        """
        Run all validation checks

        Args:
            verbose: Print the check report

        Returns:
            bool: True when no error was found

        Raises:
            ValidationError: If any validation fails
        """
        if verbose:
            print("=" * 70)
            print("VALIDATING SURFACE NETWORK")
            print("=" * 70)

        self._validate_hru_indices()
        for basin in self.network.basins:
            self._validate_geometry(basin)
            self._validate_patches(basin)

        if verbose:
            self._report_validation_results()

        if self.errors:
            raise ValidationError(f"Validation failed with {len(self.errors)} error(s)")

        if verbose:
            print("\n✓ All validation checks passed!")
            print(f"  Basins: {self.network.nbasin}")
            print(f"  HRUs: {self.network.nhru} (max {self.network.nhru_max} per basin)")
            print(f"  Patches: {self.network.npatch}")
            print("=" * 70)

        return True

    def _validate_hru_indices(self):
        """Every worker-wide HRU index belongs to exactly one basin"""
        owner = np.full(self.network.nhru, -1, dtype=np.int64)
        for basin in self.network.basins:
            for ihru in basin.ihru:
                if ihru < 0 or ihru >= self.network.nhru:
                    self.errors.append(
                        f"Basin {basin.basin_id}: HRU index {ihru} outside [0, {self.network.nhru})")
                    continue
                if owner[ihru] >= 0:
                    self.errors.append(
                        f"HRU index {ihru} is shared by basins {owner[ihru]} and {basin.basin_id}")
                owner[ihru] = basin.basin_id

        nfree = int(np.sum(owner < 0))
        if nfree > 0:
            self.warnings.append(f"{nfree} HRU(s) are not assigned to any basin")

    def _validate_geometry(self, basin):
        """Geometry used as a divisor must be positive"""
        bid = basin.basin_id

        bad = np.where(~(basin.area > 0.0))[0]
        if len(bad) > 0:
            self.errors.append(f"Basin {bid}: non-positive area at HRU(s) {bad[:5].tolist()}")

        if basin.nhru > 1:
            links = basin.downstream >= 0
            bad = np.where(links & ~(basin.flen > 0.0))[0]
            if len(bad) > 0:
                self.errors.append(
                    f"Basin {bid}: non-positive interface width at HRU(s) {bad[:5].tolist()}")

            bad = np.where(links & ~(basin.plen > 0.0))[0]
            if len(bad) > 0:
                self.errors.append(
                    f"Basin {bid}: non-positive path length at HRU(s) {bad[:5].tolist()}")

        bad = np.where(basin.hand < 0.0)[0]
        if len(bad) > 0:
            self.warnings.append(
                f"Basin {bid}: negative height above drainage at HRU(s) {bad[:5].tolist()}")

    def _validate_patches(self, basin):
        """Patch ranges are inside the patch arrays and fractions sum to one"""
        bid = basin.basin_id
        npatch = self.network.npatch
        frac = self.network.patch_frac

        for i in range(basin.nhru):
            istt = basin.patch_start[i]
            iend = basin.patch_end[i]
            if iend <= istt:
                self.errors.append(f"Basin {bid}: HRU {i} has no patch")
                continue
            if istt < 0 or iend > npatch:
                self.errors.append(
                    f"Basin {bid}: HRU {i} patch range [{istt}, {iend}) outside [0, {npatch})")
                continue

            subfrc = frac[istt:iend]
            if np.any(subfrc < 0.0):
                self.errors.append(f"Basin {bid}: HRU {i} has negative patch fraction")
            elif abs(np.sum(subfrc) - 1.0) > self.frac_tol:
                self.warnings.append(
                    f"Basin {bid}: patch fractions of HRU {i} sum to {np.sum(subfrc):.6f}")

    def _report_validation_results(self):
        """Print validation results"""
        print()
        print("-" * 70)
        print("VALIDATION SUMMARY")
        print("-" * 70)

        if self.warnings:
            print(f"\n⚠️  {len(self.warnings)} WARNING(S):")
            for i, warning in enumerate(self.warnings, 1):
                print(f"\n{i}. {warning}")

        if self.errors:
            print(f"\n❌ {len(self.errors)} ERROR(S):")
            for i, error in enumerate(self.errors, 1):
                print(f"\n{i}. {error}")
        else:
            print("\n✓ No errors found")

        print("-" * 70)


def validate_network(network, verbose=True):
    """
    Convenience function to validate a surface network

    Args:
        network: SurfaceNetwork object
        verbose: Print the check report

    Returns:
        NetworkValidator: validator holding the collected warnings

    Raises:
        ValidationError: If validation fails
    """
    validator = NetworkValidator(network)
    validator.validate(verbose=verbose)
    return validator

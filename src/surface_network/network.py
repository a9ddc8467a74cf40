"""
Hillslope surface network topology

Each basin is a directed in-forest of HRUs converging to a single outlet.
The downstream links, the upstream table and an explicit topological order
are built once here and stay read-only while routing.
"""
import numpy as np

from .validation import ValidationError


def build_upstream_table(downstream):
    """
    Build the upstream (children) table from downstream links

    Parameters:
    -----------
    downstream : ndarray (nhru,)
        Downstream HRU index, -1 at the outlet

    Returns:
    --------
    upstream_ptr : ndarray (nhru+1,)
        CSR row pointer
    upstream_idx : ndarray (nlink,)
        Upstream HRU indices, row i holds the HRUs draining into i
    """
    nhru = len(downstream)
    counts = np.zeros(nhru, dtype=np.int64)
    for i in range(nhru):
        j = downstream[i]
        if j >= 0:
            counts[j] += 1

    upstream_ptr = np.zeros(nhru + 1, dtype=np.int64)
    upstream_ptr[1:] = np.cumsum(counts)

    upstream_idx = np.zeros(upstream_ptr[-1], dtype=np.int64)
    fill = upstream_ptr[:-1].copy()
    for i in range(nhru):
        j = downstream[i]
        if j >= 0:
            upstream_idx[fill[j]] = i
            fill[j] += 1

    return upstream_ptr, upstream_idx


def build_topological_order(downstream, upstream_ptr, upstream_idx):
    """
    Order HRUs so that every HRU comes after its downstream neighbour

    Breadth-first walk from the outlet over the upstream table.

    Returns:
    --------
    order : ndarray (nhru,)
        order[0] is the outlet
    rank : ndarray (nhru,)
        Position of each HRU in order

    Raises:
    -------
    ValidationError
        If there is not exactly one outlet, or some HRU never reaches it
    """
    nhru = len(downstream)
    outlets = np.where(downstream == -1)[0]
    if len(outlets) != 1:
        raise ValidationError(f"Expected exactly one outlet, found {len(outlets)}")

    order = np.zeros(nhru, dtype=np.int64)
    order[0] = outlets[0]
    nvisit = 1
    head = 0
    while head < nvisit:
        i = order[head]
        head += 1
        for k in range(upstream_ptr[i], upstream_ptr[i + 1]):
            order[nvisit] = upstream_idx[k]
            nvisit += 1

    if nvisit != nhru:
        raise ValidationError(
            f"{nhru - nvisit} HRU(s) do not drain to the outlet (cycle in downstream links)")

    rank = np.empty(nhru, dtype=np.int64)
    rank[order] = np.arange(nhru, dtype=np.int64)

    return order, rank


class BasinTopology:
    """Topology and geometry of one basin (read-only during routing)"""

    def __init__(self, basin_id, ihru, downstream, flen, plen, hand, area,
                 patch_start, patch_end):
        """
        Parameters:
        -----------
        basin_id : int
            Basin identifier
        ihru : array-like (nhru,)
            Worker-wide HRU index of each basin-local HRU
        downstream : array-like (nhru,)
            Basin-local downstream HRU index, -1 at the outlet
        flen : array-like (nhru,)
            Width of the interface with the downstream HRU [m]
        plen : array-like (nhru,)
            Flow path length used in the CFL condition [m]
        hand : array-like (nhru,)
            Height above nearest drainage [m]
        area : array-like (nhru,)
            HRU area [m2]
        patch_start, patch_end : array-like (nhru,)
            Patch range [start, end) of each HRU in the worker-wide patch arrays
        """
        self.basin_id = int(basin_id)
        self.ihru = np.ascontiguousarray(ihru, dtype=np.int64)
        self.downstream = np.ascontiguousarray(downstream, dtype=np.int64)
        self.flen = np.ascontiguousarray(flen, dtype=np.float64)
        self.plen = np.ascontiguousarray(plen, dtype=np.float64)
        self.hand = np.ascontiguousarray(hand, dtype=np.float64)
        self.area = np.ascontiguousarray(area, dtype=np.float64)
        self.patch_start = np.ascontiguousarray(patch_start, dtype=np.int64)
        self.patch_end = np.ascontiguousarray(patch_end, dtype=np.int64)

        nhru = len(self.ihru)
        if nhru == 0:
            raise ValidationError(f"Basin {self.basin_id} has no HRU")

        for name in ('downstream', 'flen', 'plen', 'hand', 'area', 'patch_start', 'patch_end'):
            if len(getattr(self, name)) != nhru:
                raise ValidationError(
                    f"Basin {self.basin_id}: '{name}' has length {len(getattr(self, name))}, expected {nhru}")

        bad = np.where((self.downstream < -1) | (self.downstream >= nhru)
                       | (self.downstream == np.arange(nhru)))[0]
        if len(bad) > 0:
            raise ValidationError(
                f"Basin {self.basin_id}: invalid downstream index at HRU(s) {bad[:5].tolist()}")

        self.upstream_ptr, self.upstream_idx = build_upstream_table(self.downstream)
        try:
            self.order, self.rank = build_topological_order(
                self.downstream, self.upstream_ptr, self.upstream_idx)
        except ValidationError as e:
            raise ValidationError(f"Basin {self.basin_id}: {e}") from e

        # Sources have no upstream neighbour
        self.is_source = np.diff(self.upstream_ptr) == 0

    @property
    def nhru(self):
        return len(self.ihru)

    @property
    def outlet(self):
        return int(self.order[0])

    @property
    def nlink(self):
        return self.nhru - 1

    def __repr__(self):
        return (f"BasinTopology(basin_id={self.basin_id}, nhru={self.nhru}, "
                f"outlet={self.outlet}, sources={int(np.sum(self.is_source))})")


class SurfaceNetwork:
    """All basins owned by one worker, plus the worker-wide patch fractions"""

    def __init__(self, basins, patch_frac, nhru=None):
        """
        Parameters:
        -----------
        basins : list of BasinTopology
        patch_frac : array-like (npatch,)
            Area fraction of each patch within its HRU
        nhru : int, optional
            Number of worker-wide HRUs (default: largest HRU index + 1)
        """
        self.basins = list(basins)
        self.patch_frac = np.ascontiguousarray(patch_frac, dtype=np.float64)

        if nhru is None:
            nhru = 0
            for basin in self.basins:
                nhru = max(nhru, int(np.max(basin.ihru)) + 1)
        self.nhru = int(nhru)

    @property
    def nbasin(self):
        return len(self.basins)

    @property
    def npatch(self):
        return len(self.patch_frac)

    @property
    def nhru_max(self):
        """Largest basin size, used to size scratch buffers"""
        if not self.basins:
            return 0
        return max(basin.nhru for basin in self.basins)

    def __iter__(self):
        return iter(self.basins)

    def __len__(self):
        return len(self.basins)

    def __repr__(self):
        return (f"SurfaceNetwork(nbasin={self.nbasin}, nhru={self.nhru}, "
                f"npatch={self.npatch})")

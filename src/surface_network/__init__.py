"""
Surface Network Package
Hillslope HRU topology, namelist configuration and network file I/O
"""
from .namelist import Namelist
from .validation import ValidationError, NetworkValidator, validate_network
from .network import BasinTopology, SurfaceNetwork, build_upstream_table, build_topological_order
from .netcdf_io import read_surface_network, write_surface_network

__version__ = '1.0.0'
__all__ = [
    'Namelist',
    'ValidationError',
    'NetworkValidator',
    'validate_network',
    'BasinTopology',
    'SurfaceNetwork',
    'build_upstream_table',
    'build_topological_order',
    'read_surface_network',
    'write_surface_network',
]

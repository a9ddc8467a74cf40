"""
Hillslope surface flow routing

Routes ponded surface water between the HRUs of each basin with a
Godunov-type shallow water scheme and adaptive sub-stepping.
"""

from .physics import SurfaceFlowPhysics
from .state import SurfaceFlowState
from .scratch import ScratchArena
from .diagnostic import DiagnosticManager
from .time_control import TimeControl
from .runner import SurfaceFlowRunner, run_surface_flow_model

__all__ = [
    'SurfaceFlowPhysics',
    'SurfaceFlowState',
    'ScratchArena',
    'DiagnosticManager',
    'TimeControl',
    'SurfaceFlowRunner',
    'run_surface_flow_model',
]

"""
resweep - Resumable, early-stopping sweep optimization.

Expand budget schedules, stop on convergence, checkpoint and resume.
"""

from resweep.driver import Driver, DriverResult, DriverStatus, run_optimization
from resweep.state import OptimizationState, StepResult

__version__ = "0.1.0"
__all__ = [
    "Driver",
    "DriverResult",
    "DriverStatus",
    "OptimizationState",
    "StepResult",
    "__version__",
    "run_optimization",
]

#Expose the high-level pipeline pieces:
#Candidate filtering (hard rules)
#Order lifecycle state machine
#Assignment orchestrator (the "one call" entry point)

from .candidate_filter import list_eligible_drivers
from .state_machines.order_state import OrderStateMachine
from .state_machines.driver_state import DriverLocationService
from .assignment import DispatchAssignment
from .policy import AssignmentPolicy, default_assignment_policy

__all__ = [
    "list_eligible_drivers",
    "OrderStateMachine",
    "DriverLocationService",
    "DispatchAssignment",
    "AssignmentPolicy",
    "default_assignment_policy",
]

"""
Purpose: Orchestrator for driver/vehicle assignment (the "glue").
What it does:
Loads the collaborators an eligibility decision needs, applies the pure
candidate filter and hands the actual mutation to the order state machine.
A manual override skips the eligibility gate, matching admin behavior.
"""

import logging
from typing import List, Optional

from common.errors import NotFound, ValidationError
from drivers.models import Driver
from drivers.repository import DriverRepository, StoreLookup, TeamRepository, ZoneRepository
from orders.models import Order
from .candidate_filter import list_eligible_drivers
from .policy import AssignmentPolicy, default_assignment_policy
from .state_machines.order_state import OrderStateMachine

logger = logging.getLogger(__name__)


class DispatchAssignment:

    def __init__(
        self,
        state_machine: OrderStateMachine,
        drivers: DriverRepository,
        teams: TeamRepository,
        stores: StoreLookup,
        zones: Optional[ZoneRepository] = None,
        policy: Optional[AssignmentPolicy] = None,
    ):
        self.state_machine = state_machine
        self.drivers = drivers
        self.teams = teams
        self.stores = stores
        self.zones = zones
        self.policy = policy or default_assignment_policy()

    def eligible_drivers_for(self, order: Order) -> List[Driver]:
        """
        Every driver allowed to take `order` under the current policy.
        """
        no_go_zones = None
        if self.policy.exclude_no_go_zones and self.zones is not None:
            no_go_zones = self.zones.exclusion_zones()

        return list_eligible_drivers(
            order,
            self.drivers.list(),
            self.teams.list(),
            self.stores.list(),
            no_go_zones=no_go_zones,
        )

    def assign(
        self,
        order: Order,
        driver_id: str,
        vehicle_id: Optional[str] = None,
        *,
        override: bool = False,
        status=None,
    ) -> Order:
        """
        Assign a driver after the eligibility gate (unless overridden).
        """
        if self.drivers.get(driver_id) is None:
            raise NotFound(f"Driver {driver_id} not found")

        if self.policy.enforce_hub_eligibility and not override:
            eligible_ids = {driver.id for driver in self.eligible_drivers_for(order)}
            if driver_id not in eligible_ids:
                raise ValidationError(f"Driver {driver_id} is not eligible for order {order.id}")
        elif override:
            logger.info("Manual override: assigning driver %s to order %s without eligibility check", driver_id, order.id)

        return self.state_machine.assign_driver(order, driver_id, vehicle_id, status=status)

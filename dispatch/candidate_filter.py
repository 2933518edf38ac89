#Purpose: Non-routing hard eligibility filtering (rule gates).
#Builds the set of drivers allowed to take an order before any manual choice.
#Rules:
#hub membership: driver's team hub == hub of the order's store
#optional: not currently inside a No-go exclusion zone
#Pure: no mutation, no I/O.

from typing import Dict, Iterable, List, Optional, Sequence

from drivers.models import Driver, Store, Team
from geofencing.engine import check_point
from geofencing.models import ExclusionZone, ZoneType
from orders.models import Order


def order_hub_id(order: Order, stores: Iterable[Store]) -> Optional[str]:
    for store in stores:
        if store.id == order.store_id:
            return store.hub_id
    return None


def is_driver_eligible(driver: Driver, hub_id: Optional[str], teams_by_id: Dict[str, Team]) -> bool:
    #fail closed: an order without a hub, or a driver without a team, matches nobody
    if hub_id is None or driver.team_id is None:
        return False
    team = teams_by_id.get(driver.team_id)
    return team is not None and team.hub_id == hub_id


def list_eligible_drivers(
        order: Order,
        drivers: Iterable[Driver],
        teams: Iterable[Team],
        stores: Iterable[Store],
        *,
        no_go_zones: Optional[Sequence[ExclusionZone]] = None,
) -> List[Driver]:
    """
    Drivers whose team belongs to the same hub as the order's store.

    Args:
        order: the order being dispatched (only store_id is read)
        drivers: candidate pool, order is preserved in the output
        teams: every team the drivers may belong to
        stores: stores to resolve the order's hub from
        no_go_zones: when given, drivers standing inside one of these are dropped

    Returns:
        List[Driver] of eligible drivers.
    """
    hub_id = order_hub_id(order, stores)
    teams_by_id = {team.id: team for team in teams}

    eligible = []
    for driver in drivers:
        if not is_driver_eligible(driver, hub_id, teams_by_id):
            continue

        if no_go_zones:
            if check_point(driver.location, no_go_zones, zone_type=ZoneType.NO_GO).is_inside:
                continue

        eligible.append(driver)

    return eligible

"""
Purpose: The Tookan protocol adapter (inbound side).
What it does:
Accepts Tookan-shaped calls (create task, add/edit agent, assign agent, get job
details), translates them into Order/Driver terms and drives the state
machine and dispatch assignment with them. Responses go back in Tookan's
shape inside the {status, message, data} envelope.

Owns no state besides the persisted ID table it is given.
"""
from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import replace
from typing import Any, Callable, ContextManager, Dict, Mapping, Optional, Tuple

from common.errors import FleetError, NotFound, ValidationError
from common.geo import Location
from dispatch.assignment import DispatchAssignment
from dispatch.state_machines.order_state import OrderStateMachine
from drivers.models import Driver, DriverStatus
from drivers.repository import DriverRepository, StoreLookup
from orders.models import Order
from orders.repository import OrderRepository
from .codes import as_int, code_to_status
from .id_map import IdKind, TookanIdMap
from .transform import agent_to_driver_fields, driver_to_agent, order_to_task, task_to_order_fields

logger = logging.getLogger(__name__)

UnitOfWork = Callable[[], ContextManager]

SUCCESS_MESSAGES = {
    "create_task": "Task created successfully",
    "add_agent": "Agent added successfully",
    "edit_agent": "Agent updated successfully",
    "assign_agent": "Agent assigned successfully",
    "get_job_details": "Task details retrieved",
}


def success_response(data: Any, message: str = "Success") -> Dict[str, Any]:
    return {"status": 200, "message": message, "data": data}


def error_response(message: str, status_code: int = 400) -> Dict[str, Any]:
    return {"status": status_code, "message": message, "data": None}


def _is_blank(value: Any) -> bool:
    return value is None or value == ""


class TookanAdapter:

    def __init__(
        self,
        *,
        orders: OrderRepository,
        drivers: DriverRepository,
        stores: StoreLookup,
        id_map: TookanIdMap,
        state_machine: OrderStateMachine,
        dispatch: DispatchAssignment,
        tracking_base_url: str = "https://track.example.com",
        api_key: Optional[str] = None,
        unit_of_work: Optional[UnitOfWork] = None,
    ):
        self.orders = orders
        self.drivers = drivers
        self.stores = stores
        self.id_map = id_map
        self.state_machine = state_machine
        self.dispatch = dispatch
        self.tracking_base_url = tracking_base_url.rstrip("/")
        # When set, inbound calls must present exactly this key.
        self.api_key = api_key
        # Every operation commits all of its writes or none of them.
        self.unit_of_work = unit_of_work or nullcontext

    def handle(self, operation: str, payload: Optional[Mapping[str, Any]]) -> Tuple[int, Dict[str, Any]]:
        """
        Run one operation and wrap the outcome in the response envelope.
        Returns (http_status, envelope); the two status values always agree.
        """
        if operation not in SUCCESS_MESSAGES:
            return 404, error_response(f"Unknown operation: {operation}", 404)

        try:
            with self.unit_of_work():
                data = getattr(self, operation)(payload or {})
        except FleetError as error:
            logger.warning("Tookan %s rejected (%s): %s", operation, error.status_code, error.message)
            return error.status_code, error_response(error.message, error.status_code)
        except Exception as error:
            logger.exception("Tookan %s failed", operation)
            return 500, error_response(str(error), 500)

        return 200, success_response(data, SUCCESS_MESSAGES[operation])

    # --- Operations ---

    def create_task(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_api_key(payload)
        fields = task_to_order_fields(payload)

        # No store on the wire: serve the task from the store nearest to the pickup.
        store = self.stores.find_nearest(fields.origin)
        if store is None:
            raise ValidationError("No store available to serve the pickup location")

        driver_id = vehicle_id = None
        if fields.fleet_id is not None:
            driver = self._resolve_driver(fields.fleet_id)
            driver_id, vehicle_id = driver.id, driver.vehicle_id

        order = Order.new(
            store_id=store.id,
            driver_id=driver_id,
            vehicle_id=vehicle_id,
            team_id=self._resolve_team(fields.team_id),
            **fields.order_kwargs(),
        )
        # issue the job_id before committing the order
        self.id_map.external_id(IdKind.ORDER, order.id)
        saved = self.state_machine.create(order)
        logger.info("Tookan task %s created as order %s (store %s)", fields.title, saved.id, store.id)

        return self._task_payload(saved, with_tracking=str(payload.get("tracking_link")) == "1")

    def add_agent(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_api_key(payload)
        if not payload.get("email") or not payload.get("phone") or not payload.get("username"):
            raise ValidationError("Email, phone, and username are required")

        fields = agent_to_driver_fields(payload)
        fields["team_id"] = self._resolve_team(fields["team_id"])

        driver = self.drivers.add(
            Driver(
                id="",  # allocated by the repository
                location=Location(lat=0.0, lng=0.0),
                status=DriverStatus.AVAILABLE,
                **fields,
            )
        )
        logger.info("Tookan agent %s added as driver %s", payload.get("username"), driver.id)
        return self._agent_payload(driver)

    def edit_agent(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_api_key(payload)
        if _is_blank(payload.get("fleet_id")):
            raise ValidationError("Fleet ID is required")

        driver = self._resolve_driver(payload["fleet_id"])
        fields = agent_to_driver_fields(payload, partial=True)
        if "team_id" in fields:
            fields["team_id"] = self._resolve_team(fields["team_id"])

        updated = self.drivers.put(replace(driver, **fields))
        return self._agent_payload(updated)

    def assign_agent(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_api_key(payload)
        if _is_blank(payload.get("fleet_id")) or _is_blank(payload.get("job_id")):
            raise ValidationError("Fleet ID and Job ID are required")

        driver = self._resolve_driver(payload["fleet_id"])
        order = self._resolve_order(payload["job_id"])

        # job_status 0 / missing means "just assign"
        job_status = as_int(payload.get("job_status"))
        status = code_to_status(job_status) if job_status else None

        saved = self.dispatch.assign(order, driver.id, override=True, status=status)
        return self._task_payload(saved, with_tracking=False)

    def get_job_details(self, payload: Mapping[str, Any]) -> Dict[str, Any]:
        self._check_api_key(payload)
        if _is_blank(payload.get("job_id")):
            raise ValidationError("Job ID is required")

        order = self._resolve_order(payload["job_id"])
        driver = self.drivers.get(order.driver_id) if order.driver_id else None

        details = self._task_payload(order, with_tracking=True)
        details.update({
            "job_description": order.description,
            "customer_name": order.customer_name,
            "customer_phone": order.customer_phone,
            "job_pickup_address": order.origin.address,
            "job_delivery_address": order.destination.address,
            "fleet_name": driver.name if driver else None,
            "fleet_phone": driver.phone if driver else None,
        })
        return details

    # --- Helpers ---

    def _check_api_key(self, payload: Mapping[str, Any]) -> None:
        api_key = payload.get("api_key")
        if not api_key:
            raise ValidationError("API key is required")
        if self.api_key and api_key != self.api_key:
            raise ValidationError("API key is invalid")

    def _resolve_driver(self, fleet_id: Any) -> Driver:
        internal_id = self.id_map.internal_id(IdKind.DRIVER, fleet_id)
        driver = self.drivers.get(internal_id) if internal_id else None
        if driver is None:
            raise NotFound("Agent not found")
        return driver

    def _resolve_order(self, job_id: Any) -> Order:
        internal_id = self.id_map.internal_id(IdKind.ORDER, job_id)
        order = self.orders.get(internal_id) if internal_id else None
        if order is None:
            raise NotFound("Task not found")
        return order

    def _resolve_team(self, team_id: Any) -> Optional[str]:
        if _is_blank(team_id):
            return None
        internal_id = self.id_map.internal_id(IdKind.TEAM, team_id)
        if internal_id is None:
            logger.warning("Unknown Tookan team_id %s, leaving team unset", team_id)
        return internal_id

    def _external(self, kind: IdKind, internal_id: Optional[str]) -> Optional[int]:
        return self.id_map.external_id(kind, internal_id) if internal_id else None

    def _task_payload(self, order: Order, *, with_tracking: bool) -> Dict[str, Any]:
        return order_to_task(
            order,
            job_id=self.id_map.external_id(IdKind.ORDER, order.id),
            fleet_id=self._external(IdKind.DRIVER, order.driver_id),
            team_id=self._external(IdKind.TEAM, order.team_id),
            tracking_link=f"{self.tracking_base_url}/{order.id}" if with_tracking else None,
        )

    def _agent_payload(self, driver: Driver) -> Dict[str, Any]:
        return driver_to_agent(
            driver,
            fleet_id=self.id_map.external_id(IdKind.DRIVER, driver.id),
            team_id=self._external(IdKind.TEAM, driver.team_id),
        )

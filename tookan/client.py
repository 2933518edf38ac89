#Purpose: The Tookan "adapter/client" for outbound calls.
#Sole responsibility: talk to a real Tookan deployment over HTTP and return the
#`data` part of its envelope.
#Encapsulates Tookan-specific details:
#endpoint paths (/v2/create_task, /v2/assign_task, ...)
#api_key injection
#bounded timeouts + small exponential backoff retry budget
#envelope validation
#It should not contain dispatch rules or ID bookkeeping beyond building payloads.

import logging
import time
from typing import Any, Dict, Optional

import requests

from common.config import FleetSettings, load_settings
from drivers.models import Driver
from orders.models import Order
from .codes import vehicle_to_transport_type
from .transform import order_to_task_payload

logger = logging.getLogger(__name__)


class TookanClientError(Exception):
    """Raised when Tookan cannot be reached or answers with a non-200 envelope."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TookanClient:
    """
    Tookan Adapter / Client

    Sole responsibility:
    - Talk to Tookan via HTTP
    - Retry transport failures and 5xx answers with exponential backoff
    - Return the normalized `data` payload
    """
    CREATE_TASK = "/v2/create_task"
    ADD_AGENT = "/v2/add_agent"
    EDIT_AGENT = "/v2/edit_agent"
    ASSIGN_AGENT = "/v2/assign_task"
    GET_JOB_DETAILS = "/v2/get_job_details"

    def __init__(self, settings: Optional[FleetSettings] = None, session=None, sleep=time.sleep):
        settings = settings or load_settings()
        self.base_url = settings.tookan_base_url
        self.api_key = settings.tookan_api_key
        self.timeout = settings.tookan_timeout_seconds #how long to wait for Tookan before giving up
        self.max_retries = settings.tookan_max_retries
        self.backoff = settings.tookan_backoff_seconds
        self.session = session or requests.Session()
        self._sleep = sleep

        if not self.base_url:
            raise ValueError("Tookan base URL not set. Please set TOOKAN_BASE_URL in the .env file.")
        if not self.api_key:
            raise ValueError("Tookan API key not set. Please set TOOKAN_API_KEY in the .env file.")

    #----------------
    # Public methods, one per supported Tookan operation
    #----------------
    def create_task(self, order: Order, *, fleet_id: Optional[int] = None, team_id: Optional[int] = None) -> Dict[str, Any]:
        return self._post(self.CREATE_TASK, order_to_task_payload(order, fleet_id=fleet_id, team_id=team_id))

    def add_agent(self, driver: Driver, *, username: str, team_id: Optional[int] = None) -> Dict[str, Any]:
        first_name, _, last_name = driver.name.partition(" ")
        return self._post(self.ADD_AGENT, {
            "email": driver.email,
            "phone": driver.phone,
            "username": username,
            "first_name": first_name,
            "last_name": last_name,
            "transport_type": vehicle_to_transport_type(driver.vehicle_type),
            "transport_desc": driver.vehicle_description,
            "license": driver.license,
            "team_ids": str(team_id) if team_id is not None else "",
        })

    def edit_agent(self, fleet_id: int, **fields) -> Dict[str, Any]:
        return self._post(self.EDIT_AGENT, {"fleet_id": fleet_id, **fields})

    def assign_agent(self, job_id: int, fleet_id: int, job_status: Optional[int] = None) -> Dict[str, Any]:
        body = {"job_id": job_id, "fleet_id": fleet_id}
        if job_status is not None:
            body["job_status"] = job_status
        return self._post(self.ASSIGN_AGENT, body)

    def get_job_details(self, job_id: int) -> Dict[str, Any]:
        return self._post(self.GET_JOB_DETAILS, {"job_id": job_id})

    #----------------
    # Internal helpers
    #----------------
    def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url.rstrip('/')}{path}"
        payload = {"api_key": self.api_key, **body}

        for attempt in range(self.max_retries):
            last_attempt = attempt == self.max_retries - 1
            try:
                response = self.session.post(url, json=payload, timeout=self.timeout)
            except requests.RequestException as error:
                if last_attempt:
                    raise TookanClientError(f"Tookan unreachable at {path}: {error}")
                self._backoff(attempt, path, error)
                continue

            if response.status_code >= 500 and not last_attempt:
                self._backoff(attempt, path, f"HTTP {response.status_code}")
                continue

            return self._unwrap(path, response)

        # max_retries >= 1 is validated, every path above returns or raises
        raise TookanClientError(f"Tookan call {path} exhausted {self.max_retries} attempts")

    def _backoff(self, attempt: int, path: str, reason) -> None:
        wait = self.backoff * (2 ** attempt)
        logger.warning("Retrying Tookan %s (%d/%d) in %.2fs: %s", path, attempt + 1, self.max_retries, wait, reason)
        self._sleep(wait)

    def _unwrap(self, path: str, response) -> Dict[str, Any]:
        try:
            envelope = response.json()
        except ValueError:
            raise TookanClientError(f"Tookan {path} returned a non-JSON body", response.status_code)

        status = envelope.get("status", response.status_code)
        if response.status_code != 200 or status != 200:
            raise TookanClientError(f"Tookan {path} error: {envelope.get('message', 'Unknown error')}", status)
        return envelope.get("data") or {}

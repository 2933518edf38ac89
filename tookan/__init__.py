"""
Tookan interoperability package.

Public API:
- Code tables: status_to_code, code_to_status
- ID table: IdKind, TookanIdMap, InMemoryTookanIdMap
- Inbound adapter: TookanAdapter
- Outbound client: TookanClient, TookanClientError
"""
from .codes import code_to_status, status_to_code
from .id_map import IdKind, InMemoryTookanIdMap, TookanIdMap
from .adapter import TookanAdapter, error_response, success_response
from .client import TookanClient, TookanClientError

__all__ = [
    "code_to_status",
    "status_to_code",
    "IdKind",
    "TookanIdMap",
    "InMemoryTookanIdMap",
    "TookanAdapter",
    "success_response",
    "error_response",
    "TookanClient",
    "TookanClientError",
]

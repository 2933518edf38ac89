"""
Purpose: Central configuration for driver eligibility during assignment.
What it does:

Stores the switches the assignment workflow consults:

ENFORCE_HUB_ELIGIBILITY = True
EXCLUDE_NO_GO_ZONES = False

Rule: No logic here, just parameters so you can tune without rewriting code.
"""

from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class AssignmentPolicy:
    """
    Central configuration for dispatch eligibility.
    """

    # --- Hub membership ---
    # A driver may only take orders from stores in their team's hub.
    # Manual admin overrides bypass this regardless.
    enforce_hub_eligibility: bool = True

    # --- Exclusion zones ---
    # Drivers currently standing inside a No-go zone are not offered orders.
    exclude_no_go_zones: bool = False

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.exclude_no_go_zones and not self.enforce_hub_eligibility:
            raise ValueError("exclude_no_go_zones only applies when eligibility is enforced")


def default_assignment_policy() -> AssignmentPolicy:
    """
    Convenience factory for the default policy.
    """
    p = AssignmentPolicy()
    p.validate()
    return p

"""
Drivers domain package: drivers plus the teams, hubs, stores and vehicles
that dispatch eligibility is decided on.
"""

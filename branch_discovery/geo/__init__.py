"""
Geographic helpers for branch discovery.

Responsibilities:
- Compute great-circle distances between a user and restaurant branches.
- Reject coordinates that are geocoding noise rather than real locations.
"""

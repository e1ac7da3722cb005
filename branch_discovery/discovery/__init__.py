"""
Branch discovery engine.

Responsibilities:
- Flatten restaurants into one display row per branch.
- Stamp saved status, apply search and filter criteria.
- Merge nearby suggestions without duplicating restaurants.
- Produce the stable saved / distance / favorite-cuisine / name ordering.
"""

"""
Reservation time-slot handling.

Responsibilities:
- Generate the three candidate slots offered for "now" or for a chosen time.
- Pre-fill the date/time picker with a sensible default.
- Reconcile the slot shapes returned by different upstream code paths.
"""

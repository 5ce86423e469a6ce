"""
Services Layer

Booking core (pure functions over in-memory collections):
- court_schedule: bookable slots per court and date
- occurrence_expander: master reservations -> dated occurrences in a window
- conflict_detector: same-court overlap checks over expanded occurrences
- occupancy: booked/available slot aggregation
- slot_board: per-slot status for the public booking page

reservation_service wraps the core with validation and the
read-check-write mutation flow against the repositories.
"""

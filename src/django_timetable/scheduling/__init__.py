"""Time slots and the schedule-building services."""

"""Stateless schedule-building services."""

"""Presentations, authors, categories, and presenters."""

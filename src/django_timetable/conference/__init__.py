"""Conference, Day, and Section models and services."""

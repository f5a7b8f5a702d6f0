"""Transfer protocol models, errors and services."""

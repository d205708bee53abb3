"""Configuration-independent infrastructure: logging, database, Celery, errors."""

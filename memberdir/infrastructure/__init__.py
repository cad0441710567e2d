"""Infrastructure: persistence (SQLAlchemy) and external channel adapters (LINE)."""

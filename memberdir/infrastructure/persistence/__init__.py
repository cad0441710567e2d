"""Persistence: async engine, sessions, ORM models and repositories."""

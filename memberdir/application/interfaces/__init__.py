"""Ports (Protocols) implemented by infrastructure adapters."""

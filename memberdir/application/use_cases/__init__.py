"""Use cases: directory search engine and the chat lookup flow."""

"""Helpers for CHECK constraints over enum values."""


def in_values_check(column: str, values: list[str]) -> str:
    """Return a SQL CHECK expression: column IN ('a', 'b', ...)."""
    quoted = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    return f"{column} IN ({quoted})"

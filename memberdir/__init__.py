"""memberdir: tenant-scoped member directory lookup for LINE chat channels."""

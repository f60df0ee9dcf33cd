"""Services used by the gitsync engine."""

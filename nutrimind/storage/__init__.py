"""On-disk state: paths, saved credentials and settings."""

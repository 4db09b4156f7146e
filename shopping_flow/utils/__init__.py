"""Small pure helpers and pipeline logging."""

"""HTTP API for the audiobook library."""

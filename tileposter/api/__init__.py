"""HTTP API for the poster splitter."""

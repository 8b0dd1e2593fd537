"""HTTP service mode for forge."""

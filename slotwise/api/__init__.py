"""HTTP API: health, metrics, decision callbacks and manual ticks."""

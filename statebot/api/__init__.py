"""HTTP API: the message endpoint plus health and metrics."""

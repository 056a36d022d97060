"""Linear aggregation services for the cycle dashboard."""

"""Activity calendar service: schedule documents and calendar aggregation."""

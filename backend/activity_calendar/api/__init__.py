"""HTTP surface: shared dependencies and the versioned routers."""

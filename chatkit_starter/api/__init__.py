"""HTTP surface: middleware and route modules."""

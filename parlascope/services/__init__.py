"""Scoring, statistics, matching and caching services."""

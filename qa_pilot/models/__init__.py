"""Data structures shared across the run engine."""

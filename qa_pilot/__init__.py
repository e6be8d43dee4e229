"""Autonomous QA agent: plan, simulate and report on test runs for a URL."""

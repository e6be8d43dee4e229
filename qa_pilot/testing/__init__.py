"""Test helpers: factories, payload builders and scripted doubles."""

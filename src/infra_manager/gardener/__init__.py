"""Gardener shoot conversion and API access."""

"""Permit and license tracking API."""

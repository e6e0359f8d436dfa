"""Umrah pilgrim feedback collection and problem-trend analytics API."""

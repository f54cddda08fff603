"""Scanning, classification and cleaning core."""

"""Parsing — frame-tag scanning and identifier classification.

The scanner runs once per document at build time and never raises:
malformed markup is reported as parse notes alongside the regions that
did close cleanly.
"""

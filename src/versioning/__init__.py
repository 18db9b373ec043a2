"""Crate spec parsing and version requirements."""

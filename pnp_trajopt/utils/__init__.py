"""Shared helpers: errors and pose interpolation."""

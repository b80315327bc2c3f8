"""Smooth Generator: randomized WooCommerce-style store data for development and QA."""

__version__ = "1.2.0"

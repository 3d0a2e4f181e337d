"""Barcard: barcode creature card generator."""

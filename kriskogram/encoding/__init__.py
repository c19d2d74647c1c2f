"""Encoding modules — value scales and the value-to-visual mappings built on them."""

"""HTTP surface for Zoteroid."""

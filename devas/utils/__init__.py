"""Distance transforms and color conversions."""

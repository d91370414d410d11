"""FFT wrappers and frequency maps."""

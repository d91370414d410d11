"""Configuration, image model, errors and the filtering pipeline."""

"""Core services: configuration, errors, logging, metrics and the run pipeline."""

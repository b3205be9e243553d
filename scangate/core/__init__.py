"""Configuration, logging, persistence and the scan pipeline."""

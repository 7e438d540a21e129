"""SCFV Plan command-line interface."""

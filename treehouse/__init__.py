"""Run, watch and health-check a set of local development services."""

__version__ = "0.1.0"
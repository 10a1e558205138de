"""Actornet - relationship aggregation, layout and interrogation for actor networks."""

__version__ = "0.1.0"

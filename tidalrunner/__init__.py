"""Set up and drive SuperCollider, SuperDirt and TidalCycles over OSC."""

__version__ = "0.1.6"
"""
Babble: a persistent n-gram chat brain.

Learns word chains from observed sentences and builds replies by randomly
walking them. See services.BrainFrontend for the reply pipeline.
"""

__version__ = "1.0.0"

"""
Cable trace backend package.

Visualizes traceroute hops over submarine cable routes: builds a landing
graph from cable/landing datasets, plans per-hop cable paths and animates
them onto a map surface.
"""

__version__ = "1.0.0"

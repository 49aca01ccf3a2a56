"""
serpkit: search engine result extraction.

Turns raw SERP HTML/JSON from several engines into one normalized result
shape. See ``serpkit.search`` for the public API.
"""

__version__ = "0.1.0"

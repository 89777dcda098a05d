"""astrokit - Interactive Astro project scaffolding"""

__version__ = "0.1.0"

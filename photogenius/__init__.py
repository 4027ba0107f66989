"""
Photo Genius - upload a photo, remove its background, download the cutout.
"""

__version__ = "0.1.0"

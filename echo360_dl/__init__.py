"""
echo360-dl: downloads Echo360 lecture captures by picking the best variant of
each track from the HLS manifest and stream-copying them into one container.
"""

__version__ = "1.2.0"

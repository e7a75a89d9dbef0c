"""
SubRevise - Subtitle text revision utility.

Carries a revised transcript onto the timing of an existing subtitle track
using Smith-Waterman word alignment.
"""

__version__ = "0.1.0";
__author__ = "SubRevise Project";
__license__ = "MIT";

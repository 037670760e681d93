"""
Look Studio — virtual try-on look assembly, lookbook and shareable lookboards.
"""

__version__ = "1.0.0"

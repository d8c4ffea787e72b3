"""
crawlhtml - fetch fully-rendered HTML through a stealth browser session.
"""

__version__ = "0.1.0"

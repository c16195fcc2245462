"""Workdeck: terminal dashboard and wait tool for work-dispatch records.

Browse consumers and their resource bundles, watch a bundle live, or block
until a bundle reaches a condition from scripts.
"""

__version__ = "0.1.0"

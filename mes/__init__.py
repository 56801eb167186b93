"""
Apparel MES Reports

Reporting service for the embroidery, QC, emblem and laser production
entries of an apparel manufacturing execution system.
"""

__version__ = "1.0.0"

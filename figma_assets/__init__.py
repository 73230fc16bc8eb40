"""
Figma asset extraction: node traversal, classification and resilient image export
"""

__version__ = "1.0.0"

# FILE: image_broker/__init__.py
"""
Image broker: validates client image-generation requests and dispatches
them to an upstream image provider.
"""

__version__ = "0.3.0"

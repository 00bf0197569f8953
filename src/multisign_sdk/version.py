"""Version information for MultiSign Python SDK"""

__version__ = "0.1.0"

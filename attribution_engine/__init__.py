"""
attribution-engine: first-touch traffic attribution and analytics identity linking.
"""

__version__ = "0.1.0"

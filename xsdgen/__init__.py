"""
xsdgen: generate validating PHP and Python classes from XML Schemas.
"""

__version__ = "0.1.0"

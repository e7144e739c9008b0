"""
Swagger Service package.

This module provides a FastAPI application converting between Ballerina
service definitions and Swagger documents under `/service/swagger`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"

"""
In-memory emulator of the document database REST API.

Used as the integration target for the client: it verifies master-key
signatures, pages feeds by continuation token and can inject throttling.
"""

__version__ = "0.1.0"

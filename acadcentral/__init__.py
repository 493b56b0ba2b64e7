"""
AcadCentral Department Portal

Local Store, mirror synchronization and domain operations for the portal
client, plus the FastAPI remote mirror service.
"""

__version__ = "1.0.0"

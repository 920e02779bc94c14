"""FastAPI service for patient account registration.

This package provides the public registration endpoint and the
provisioning pipeline behind it.
"""

__version__ = "0.1.0"

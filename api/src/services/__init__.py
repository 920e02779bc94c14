"""Registration services.

This package contains payload validation, password hashing, identity
uniqueness checks and the account provisioner that orchestrates them.
"""

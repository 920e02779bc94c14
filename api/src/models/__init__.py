"""Data models for the registration service.

This package contains the Pydantic request and account models and the
SQLAlchemy table definition for stored accounts.
"""

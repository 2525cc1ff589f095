"""Test fixtures for cmakedriver."""

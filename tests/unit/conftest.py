"""
Unit test fixtures. Fake provider and in-memory DB; no network.
"""

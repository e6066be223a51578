"""Tests for contracts package.

Contract types are plain data shared across layers; these tests cover
their invariants and their persisted form, and check that the package
stays a leaf (no imports from the rest of sparkbinding).
"""

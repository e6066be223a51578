# tests/property/__init__.py
"""Property-based tests for sparkbinding.

Test categories:
- core/: Checkpoint path derivation, configuration trimming, duration and list parsing
"""

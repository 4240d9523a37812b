"""
Extension Conformance Harness

Trace-driven conformance testing for extension hosts.
"""

__version__ = "0.1.0"

"""
markpatch - Idempotent, marker-guarded patching of generated build artifacts.

This package provides a library and a CLI for injecting a fixed payload
into a generated text file exactly once.
"""

__version__ = "0.1.0"
__author__ = "markpatch"

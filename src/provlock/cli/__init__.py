"""
CLI helpers for provlock.
"""

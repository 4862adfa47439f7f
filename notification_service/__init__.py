"""Notification service package initializer.

The package re-exports nothing; sub-packages follow the domain /
application / infrastructure / interfaces layering.
"""

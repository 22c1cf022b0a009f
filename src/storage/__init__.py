"""Physical storage access.

This module lists objects in object storage for reconciliation probes.
"""

"""Unregistered data reconciliation.

This module finds data present in object storage but missing from the
catalog and registers it as INVALID for operator review.
"""

"""Metadata catalog layer.

This package resolves formats and storages, reads registered business
object data, and commits catalog changes atomically.
"""

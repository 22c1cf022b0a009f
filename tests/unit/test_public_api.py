"""Unit tests for the top-level SDK module."""

from __future__ import annotations

import lakecat


def test_public_api_exports_client_and_models() -> None:
    """Every name in __all__ should resolve on the module."""
    missing = [name for name in lakecat.__all__ if not hasattr(lakecat, name)]

    assert missing == []
    assert lakecat.LakecatClient.__name__ == "LakecatClient"

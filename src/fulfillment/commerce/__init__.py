"""Commerce order adapter registry — where coarse order status is mirrored."""

import os

_commerce_instance = None


def get_commerce():
    """Return the configured commerce-order adapter (singleton).

    Uses FakeCommerceStore by default; select another with the
    COMMERCE_ADAPTER environment variable.
    """
    global _commerce_instance
    if _commerce_instance is None:
        adapter = os.environ.get("COMMERCE_ADAPTER", "fake")
        if adapter == "fake":
            from fulfillment.commerce.fake_adapter import FakeCommerceStore

            _commerce_instance = FakeCommerceStore()
        else:
            raise ValueError(f"Unknown commerce adapter: {adapter}")
    return _commerce_instance


def set_commerce(adapter) -> None:
    """Install a specific adapter instance."""
    global _commerce_instance
    _commerce_instance = adapter


def reset_commerce():
    """Reset the commerce singleton (useful for testing)."""
    global _commerce_instance
    _commerce_instance = None

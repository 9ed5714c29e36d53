"""Commerce order port — the merchant-facing order record.

The fulfillment order keeps the fine-grained status; the commerce order only
knows a coarser vocabulary and a copy of the tracking details.
"""

from abc import ABC, abstractmethod


class CommerceOrderPort(ABC):
    @abstractmethod
    def update_status(self, commerce_order_id: str, status: str) -> None:
        """Overwrite the commerce order's status with a coarse status value."""
        ...

    @abstractmethod
    def update_tracking(self, commerce_order_id: str, tracking: dict) -> None:
        """Copy tracking fields (tracking_number, tracking_url, courier_provider).

        Only keys present in ``tracking`` are written.
        """
        ...

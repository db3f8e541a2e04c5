"""
Abstract base classes defining the core contracts for Listora.

Classifiers, converters and publishers implement these interfaces so the
publish service can be wired with fakes in tests and with other marketplaces
later.
"""

from abc import ABC, abstractmethod
from typing import Any

from listora.core.models import (
    CategoryResult,
    ProductContent,
    PublishingOptions,
    PublishResult,
    SellerToken,
    ListingDocument,
)


class IClassifiable(ABC):
    """Interface for marketplace category classifiers."""

    @abstractmethod
    async def classify(self, content: ProductContent) -> CategoryResult:
        """
        Resolve a leaf category for the product.

        Returns:
            CategoryResult with a non-empty category id. Implementations never
            raise; lookup failures degrade to a fallback table.
        """
        ...


class IConvertable(ABC):
    """Interface for marketplace-specific listing converters."""

    @abstractmethod
    def build(
        self,
        content: ProductContent,
        options: PublishingOptions,
        images: list[str],
        category: CategoryResult,
        **kwargs: Any,
    ) -> Any:
        """
        Assemble the marketplace payload. Pure: no I/O, deterministic for
        the same inputs.

        Raises:
            PublishValidationError: Only when an input the payload cannot do
                without (price) is missing.
        """
        ...


class IPublishable(ABC):
    """Interface for live marketplace publishing."""

    @abstractmethod
    async def publish(self, document: ListingDocument, token: SellerToken) -> PublishResult:
        """
        Create the listing on the marketplace.

        Raises:
            TransportFailureError: The marketplace could not be reached.
            PlatformRejectedError: The marketplace refused the listing.
        """
        ...

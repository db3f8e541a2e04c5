"""
Abstract base converter for marketplace listing documents.
"""

import time
from abc import abstractmethod
from typing import Any

from listora.content.normalizer import clean_product_name, extract_title
from listora.converters.title_optimizer import TitleOptimizer
from listora.core.exceptions import PublishValidationError
from listora.core.interfaces import IConvertable
from listora.core.models import CategoryResult, ProductContent, PublishingOptions


class BaseConverter(IConvertable):
    """
    Base class for marketplace-specific converters.

    Subclasses set ``max_title_length`` and ``sku_prefix`` and implement
    ``build``. Title selection, SKU generation and the price guard are
    shared.
    """

    max_title_length: int = 80
    sku_prefix: str = "LISTORA"

    def __init__(self, title_optimizer: TitleOptimizer | None = None):
        self._title_optimizer = title_optimizer or TitleOptimizer()

    @abstractmethod
    def build(
        self,
        content: ProductContent,
        options: PublishingOptions,
        images: list[str],
        category: CategoryResult,
        **kwargs: Any,
    ) -> Any:
        """Assemble the marketplace payload."""
        ...

    def build_title(self, content: ProductContent) -> str:
        """Generated headline if one parses, else the product name, fitted to the limit."""
        source = extract_title(content.generated_content) or clean_product_name(content.product_name)
        return self._title_optimizer.optimize(source, self.max_title_length)

    def build_sku(self, options: PublishingOptions) -> str:
        if options.sku and options.sku.strip():
            return options.sku.strip()
        return f"{self.sku_prefix}-{int(time.time() * 1000)}"

    def require_price(self, options: PublishingOptions):
        if options.price is None:
            raise PublishValidationError("price", "A valid price is required")
        return options.price

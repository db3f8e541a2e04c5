"""
Database repository layer for Listora.

All repositories inherit from BaseRepository and provide user-scoped CRUD
operations plus entity-specific query methods.

Usage:
    from listora.db.repositories import EbayConnectionRepository

    connection_repo = EbayConnectionRepository(session)
    connection = await connection_repo.find_active(user_id)
"""

from listora.db.repositories.base_repo import BaseRepository
from listora.db.repositories.connection_repo import EbayConnectionRepository
from listora.db.repositories.content_repo import ProductContentRepository
from listora.db.repositories.listing_repo import EbayListingRepository
from listora.db.repositories.published_product_repo import PublishedProductRepository
from listora.db.repositories.template_repo import AmazonTemplateRepository

__all__ = [
    "AmazonTemplateRepository",
    "BaseRepository",
    "EbayConnectionRepository",
    "EbayListingRepository",
    "ProductContentRepository",
    "PublishedProductRepository",
]

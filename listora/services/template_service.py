"""
Amazon template flow: generate a Seller Central flat file and keep it for download.

No marketplace call is made. The generated fields are stored in
``amazon_templates`` and the upload file is re-rendered from them on every
download, so older templates always come back in the current file format.
"""

import logging
import uuid
from enum import StrEnum

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listora.converters.amazon_template_converter import PRODUCT_TYPES, AmazonTemplateConverter
from listora.core.exceptions import PersistenceError
from listora.core.logging_config import publish_log_context
from listora.core.models import (
    ListingStatus,
    Platform,
    ProductContent,
    PublishingOptions,
    PublishResult,
    TemplateDocument,
)
from listora.db.database import get_session_factory
from listora.db.mappers import content_from_record, published_product_from_result, template_from_document
from listora.db.repositories import AmazonTemplateRepository, ProductContentRepository, PublishedProductRepository
from listora.listers.amazon_template import render_csv, render_flat_file
from listora.services.publish_service import validate_publish_request

logger = logging.getLogger(__name__)


class TemplateFormat(StrEnum):
    TSV = "tsv"
    CSV = "csv"


class TemplateService:
    """
    Generates and serves Amazon flat-file templates.

    Usage:
        service = TemplateService()
        result, document = await service.generate(content, images, options, user_id)
        document = await service.download(template_id, user_id, TemplateFormat.CSV)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        converter: AmazonTemplateConverter | None = None,
    ):
        self._session_factory = session_factory or get_session_factory()
        self._converter = converter or AmazonTemplateConverter()

    async def generate(
        self,
        content: ProductContent,
        images: list[str] | None,
        options: PublishingOptions,
        user_id: uuid.UUID,
        product_type: str | None = None,
    ) -> tuple[PublishResult, TemplateDocument]:
        """
        Build the template and store it.

        Returns:
            (PublishResult, TemplateDocument). The result's
            ``platform_product_id`` is the stored template id, or None when
            the template could not be stored.

        Raises:
            PublishValidationError: Missing user, product data or price.
        """
        validate_publish_request(content, options, user_id)

        with publish_log_context(user_id=user_id, platform=Platform.AMAZON.value, sku=options.sku):
            async with self._session_factory() as session:
                content = await self._load_content(session, content, user_id)
                document = self._converter.build(content, options, images or [], product_type=product_type)
                template_id = await self._store(session, document, content, user_id, options, images or [])
                await session.commit()

        result = PublishResult(
            success=True,
            platform=Platform.AMAZON,
            platform_product_id=str(template_id) if template_id else None,
            sku=document.sku,
            raw={
                "method": "amazon_template",
                "product_type": document.product_type,
                "filename": document.filename,
                "fields_count": len(document.fields),
                "image_count": sum(1 for key, value in document.fields.items() if "image_url" in key and value),
            },
        )
        logger.info(f"Amazon template {template_id} generated ({document.product_type}, SKU {document.sku})")
        return result, document

    async def _load_content(
        self, session: AsyncSession, content: ProductContent, user_id: uuid.UUID
    ) -> ProductContent:
        if content.id is None:
            return content
        record = await ProductContentRepository(session).find_latest(user_id, content.id)
        if record is None:
            logger.info(f"Content {content.id} not stored for user {user_id}, using request data")
            return content.model_copy(update={"id": None})
        stored = content_from_record(record)
        return content.model_copy(update=stored.model_dump(exclude_none=True))

    async def _store(
        self,
        session: AsyncSession,
        document: TemplateDocument,
        content: ProductContent,
        user_id: uuid.UUID,
        options: PublishingOptions,
        images: list[str],
    ) -> uuid.UUID | None:
        try:
            async with session.begin_nested():
                template = await AmazonTemplateRepository(session).add(
                    template_from_document(document, user_id, content_id=content.id)
                )
        except PersistenceError as e:
            logger.warning(f"PersistenceError: amazon template not saved: {e.message} {e.details}")
            return None
        except SQLAlchemyError as e:
            logger.warning(f"PersistenceError: amazon template not saved: {type(e).__name__}: {e}")
            return None

        projection = published_product_from_result(
            PublishResult(success=True, platform=Platform.AMAZON, platform_product_id=str(template.id), sku=document.sku),
            document.fields.get("item_name", content.product_name),
            user_id,
            content_id=content.id,
            price=options.price,
            quantity=options.quantity,
            images=images,
            status=ListingStatus.TEMPLATE_READY,
        )
        try:
            async with session.begin_nested():
                await PublishedProductRepository(session).add(projection)
        except PersistenceError as e:
            logger.warning(f"PersistenceError: published product not saved: {e.message} {e.details}")
        except SQLAlchemyError as e:
            logger.warning(f"PersistenceError: published product not saved: {type(e).__name__}: {e}")
        return template.id

    async def download(
        self,
        template_id: uuid.UUID,
        user_id: uuid.UUID,
        file_format: TemplateFormat = TemplateFormat.TSV,
    ) -> TemplateDocument | None:
        """
        Re-render a stored template.

        Returns:
            TemplateDocument with the file content, or None when the template
            does not exist or belongs to another user.
        """
        async with self._session_factory() as session:
            template = await AmazonTemplateRepository(session).find_for_user(template_id, user_id)
            if template is None:
                return None
            fields = {key: str(value) for key, value in (template.template_data or {}).items()}
            sku, product_type = template.sku, template.product_type

        profile = PRODUCT_TYPES.get(product_type)
        if file_format == TemplateFormat.CSV:
            content, content_type, extension = render_csv(fields), "text/csv", "csv"
        else:
            category = profile.template_category if profile else product_type.lower()
            content, content_type, extension = render_flat_file(fields, category), "text/tab-separated-values", "txt"

        return TemplateDocument(
            product_type=product_type,
            sku=sku,
            fields=fields,
            filename=f"amazon-template-{sku}-{product_type}.{extension}",
            content=content,
            content_type=content_type,
        )

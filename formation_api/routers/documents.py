"""Order document upload router — multipart handling only.

Business logic lives in :mod:`formation_api.services.documents`.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from formation_api.core.config import settings
from formation_api.core.exceptions import BadRequestError, PayloadTooLargeError
from formation_api.db.base import get_db
from formation_api.schemas.orders import DocumentOut, DocumentUploadResponse
from formation_api.services import progress_rules
from formation_api.services.documents import DocumentService
from formation_api.storage import DocumentStorage, get_document_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["Order Documents"])


async def _read_upload(file: UploadFile) -> bytes:
    """Return the file contents; reject empty and oversized uploads."""
    contents = await file.read()

    if len(contents) == 0:
        raise BadRequestError("Uploaded file is empty.")

    if len(contents) > settings.max_upload_size_bytes:
        raise PayloadTooLargeError(
            f"File size exceeds the {settings.max_upload_size_mb}MB limit."
        )

    return contents


@router.post("/documents/upload", response_model=DocumentUploadResponse)
async def upload_order_document(
    file: UploadFile = File(...),
    order_id: str = Form(..., alias="orderId", min_length=1),
    document_type: str = Form(..., alias="documentType", min_length=1),
    session: AsyncSession = Depends(get_db),
    storage: DocumentStorage = Depends(get_document_storage),
):
    """Store an order document; tracked types also complete their progress step."""
    # Reject a bad type before reading the body
    progress_rules.parse_document_type(document_type)
    contents = await _read_upload(file)

    document = await DocumentService(session, storage).upload_document(
        order_id,
        document_type,
        file_name=file.filename or "document",
        content=contents,
        content_type=file.content_type,
    )
    return DocumentUploadResponse(document=DocumentOut.model_validate(document))

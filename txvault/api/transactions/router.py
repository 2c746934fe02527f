"""Transaction Endpoints.

Thin shim over TransactionService: request parsing in, domain errors out as
standardized API errors. Plaintext only ever leaves through /decrypt.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from txvault.api.transactions.models import (
    DecryptResponse,
    DeleteResponse,
    EncryptRequest,
    EncryptResponse,
    RecordListResponse,
    SecureRecordResponse,
)
from txvault.core.config import Settings
from txvault.dependencies import get_settings, get_transaction_service
from txvault.domain.envelope.errors import DecryptionError, ValidationError
from txvault.domain.envelope.service import RecordNotFound, TransactionService
from txvault.errors import raise_envelope_error

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/encrypt", status_code=201, response_model=EncryptResponse)
def encrypt_transaction(
    body: EncryptRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    """Encrypt and store a transaction. Returns metadata only."""
    try:
        record = service.encrypt(body.party_id, body.payload)
    except ValidationError as e:
        raise_envelope_error(e)
    return record.summary()


@router.get("", response_model=RecordListResponse)
def list_transactions(
    limit: Optional[int] = Query(default=None, ge=1),
    service: TransactionService = Depends(get_transaction_service),
    settings: Settings = Depends(get_settings),
):
    """List stored records, newest first (no decryption)."""
    effective = min(limit or settings.LIST_DEFAULT_LIMIT, settings.LIST_MAX_LIMIT)
    return {"records": [r.to_dict() for r in service.list_recent(effective)]}


@router.get("/{record_id}", response_model=SecureRecordResponse)
def get_transaction(
    record_id: str,
    service: TransactionService = Depends(get_transaction_service),
):
    """Return the stored record without decrypting it."""
    try:
        record = service.fetch(record_id)
    except RecordNotFound as e:
        raise_envelope_error(e, status_code=404)
    return record.to_dict()


@router.post("/{record_id}/decrypt", response_model=DecryptResponse)
def decrypt_transaction(
    record_id: str,
    service: TransactionService = Depends(get_transaction_service),
):
    """Validate, decrypt and return the original payload."""
    try:
        decrypted = service.decrypt(record_id)
    except RecordNotFound as e:
        raise_envelope_error(e, status_code=404)
    except (ValidationError, DecryptionError) as e:
        logger.warning(f"Decrypt rejected for {record_id}: {e.code}")
        raise_envelope_error(e)
    return {"id": record_id, **decrypted.to_dict()}


@router.delete("/{record_id}", response_model=DeleteResponse)
def delete_transaction(
    record_id: str,
    service: TransactionService = Depends(get_transaction_service),
):
    try:
        service.delete(record_id)
    except RecordNotFound as e:
        raise_envelope_error(e, status_code=404)
    return {"deleted": True}

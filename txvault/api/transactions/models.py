from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field


class EncryptRequest(BaseModel):
    party_id: str = Field(..., alias="partyId", min_length=1, description="Caller-supplied party identifier")
    payload: Dict[str, Any] = Field(..., description="Transaction payload (JSON object)")

    model_config = ConfigDict(populate_by_name=True)


class EncryptResponse(BaseModel):
    id: str
    partyId: str
    createdAt: str
    alg: str
    mk_version: int


class SecureRecordResponse(BaseModel):
    """Stored record as persisted: ciphertext and tags, never plaintext."""
    id: str
    partyId: str
    createdAt: str
    payload_nonce: str
    payload_ct: str
    payload_tag: str
    dek_wrap_nonce: str
    dek_wrapped: str
    dek_wrap_tag: str
    alg: str
    mk_version: int


class RecordListResponse(BaseModel):
    records: List[SecureRecordResponse]


class DecryptResponse(BaseModel):
    id: str
    partyId: str
    payload: Any
    createdAt: str


class DeleteResponse(BaseModel):
    deleted: bool

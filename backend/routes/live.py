from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from backend import repositories
from backend.auth import require_admin_email, require_backend_token
from backend.schemas import LiveDocumentResponse, LiveDocumentWrite, LiveDocumentWriteResult

router = APIRouter()


@router.get("/v1/live/{doc_id}", response_model=LiveDocumentResponse)
async def get_live_document(doc_id: str, _token: None = Depends(require_backend_token)):
    document = await repositories.get_live_document(doc_id)
    if document is None:
        raise HTTPException(status_code=404, detail="Live document not found")
    return LiveDocumentResponse(
        doc_id=document["doc_id"],
        version=document["version"],
        updated_at=document["updated_at"],
        data=document["data"],
    )


@router.put("/v1/live/{doc_id}", response_model=LiveDocumentWriteResult)
async def put_live_document(
    doc_id: str,
    payload: LiveDocumentWrite,
    user_email: str = Depends(require_admin_email),
):
    fields = payload.fields()
    if not fields:
        raise HTTPException(status_code=400, detail="Empty live document update")
    version = await repositories.upsert_live_document(doc_id, fields, user_email)
    return LiveDocumentWriteResult(ok=True, version=version)

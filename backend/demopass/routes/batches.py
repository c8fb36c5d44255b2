"""
Batch API routes - administration of demo batches.

Provides endpoints for:
- Creating a batch with its demo dates
- Listing batches and looking one up by id or by code
- Updating description/dates and deleting a batch
"""

from typing import List, Optional
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from demopass.database import get_db
from demopass.serializers import serialize_batch
from demopass.services import batches as batch_service

router = APIRouter(prefix="/api")


# ── Pydantic schemas ─────────────────────────────────────────

class BatchCreateRequest(BaseModel):
    """Schema for creating a batch."""
    batch_id: Optional[str] = Field(None, alias="batchId", description="Unique batch code")
    description: Optional[str] = Field(None, description="Batch description")
    demo_dates: Optional[List[str]] = Field(None, alias="demoDates",
                                            description="Demo dates, YYYY-MM-DD or ISO 8601")


class BatchUpdateRequest(BaseModel):
    """Schema for updating a batch; omitted fields are left unchanged."""
    batch_id: Optional[str] = Field(None, alias="batchId", description="Must match the current code")
    description: Optional[str] = None
    demo_dates: Optional[List[str]] = Field(None, alias="demoDates")


@router.post("/batches", status_code=201)
def create_batch(request: BatchCreateRequest, db: Session = Depends(get_db)):
    """Create a new batch."""
    batch = batch_service.create_batch(db, request.batch_id, request.description, request.demo_dates)
    return {"success": True, "data": serialize_batch(batch)}


@router.get("/batches")
def list_batches(db: Session = Depends(get_db)):
    """List all batches, newest first."""
    batches = batch_service.list_batches(db)
    return {
        "success": True,
        "count": len(batches),
        "data": [serialize_batch(b) for b in batches]
    }


@router.get("/batches/code/{batch_code}")
def get_batch_by_code(batch_code: str, db: Session = Depends(get_db)):
    """Look up a batch by its human readable code."""
    batch = batch_service.get_batch_by_code(db, batch_code)
    return {"success": True, "data": serialize_batch(batch)}


@router.get("/batches/{batch_id}")
def get_batch(batch_id: str, db: Session = Depends(get_db)):
    batch = batch_service.get_batch(db, batch_id)
    return {"success": True, "data": serialize_batch(batch)}


@router.put("/batches/{batch_id}")
def update_batch(batch_id: str, request: BatchUpdateRequest, db: Session = Depends(get_db)):
    """Update a batch's description and/or demo dates."""
    batch = batch_service.update_batch(
        db, batch_id,
        description=request.description,
        demo_dates=request.demo_dates,
        batch_code=request.batch_id
    )
    return {"success": True, "data": serialize_batch(batch)}


@router.delete("/batches/{batch_id}")
def delete_batch(batch_id: str, db: Session = Depends(get_db)):
    """Delete a batch with its enrollments and attendance."""
    deleted = batch_service.delete_batch(db, batch_id)
    return {"success": True, "message": "Batch deleted successfully", "data": deleted}

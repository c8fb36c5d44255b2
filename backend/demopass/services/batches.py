"""
Batch service - create, read, update and delete demo batches.

The batch code is the only identifier students ever see, so it is unique
and cannot be changed once the batch exists.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from demopass.errors import ConflictError, NotFoundError, ValidationError
from demopass.logging_config import get_logger, log_with_context
from demopass.models import Batch
from demopass.models.batch import BATCH_CODE_MAX_LENGTH
from demopass.serializers import serialize_batch
from demopass.validators import clean_text, parse_demo_dates

logger = get_logger("db")

DUPLICATE_BATCH_MESSAGE = "A batch with this ID already exists"


def create_batch(db: Session, batch_code, description, demo_dates) -> Batch:
    """
    Create a batch.

    Raises:
        ValidationError: code or description missing, or a date unparsable
        ConflictError: the code is already taken (HTTP 400)
    """
    batch_code = clean_text(batch_code)
    description = clean_text(description)
    if not batch_code:
        raise ValidationError("batchId is required")
    if len(batch_code) > BATCH_CODE_MAX_LENGTH:
        raise ValidationError("batchId must be at most {} characters".format(BATCH_CODE_MAX_LENGTH))
    if not description:
        raise ValidationError("description is required")
    dates = parse_demo_dates(demo_dates)

    if db.query(Batch).filter(Batch.batch_code == batch_code).first():
        raise ConflictError(DUPLICATE_BATCH_MESSAGE, status_code=400)

    batch = Batch(batch_code=batch_code, description=description)
    batch.demo_date_list = dates
    db.add(batch)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent create of the same code
        db.rollback()
        raise ConflictError(DUPLICATE_BATCH_MESSAGE, status_code=400)
    db.refresh(batch)

    log_with_context(logger, "INFO", "Created batch {}".format(batch_code),
                     context={"batch_id": batch.id},
                     extra_data={"demo_dates": len(dates)})
    return batch


def list_batches(db: Session) -> list:
    """All batches, newest first."""
    return db.query(Batch).order_by(Batch.created_at.desc()).all()


def get_batch(db: Session, batch_id: str) -> Batch:
    batch = db.get(Batch, batch_id)
    if not batch:
        raise NotFoundError("Batch not found")
    return batch


def get_batch_by_code(db: Session, batch_code: str) -> Batch:
    batch = db.query(Batch).filter(Batch.batch_code == batch_code).first()
    if not batch:
        raise NotFoundError("Batch not found")
    return batch


def update_batch(db: Session, batch_id: str, description=None, demo_dates=None,
                 batch_code=None) -> Batch:
    """
    Update the description and/or demo dates of a batch.

    Fields passed as None are left unchanged. Passing a batch_code that
    differs from the stored one is rejected.
    """
    batch = get_batch(db, batch_id)

    batch_code = clean_text(batch_code)
    if batch_code is not None and batch_code != batch.batch_code:
        raise ValidationError("Batch ID cannot be changed")

    if description is not None:
        description = clean_text(description)
        if not description:
            raise ValidationError("description cannot be empty")
        batch.description = description
    if demo_dates is not None:
        batch.demo_date_list = parse_demo_dates(demo_dates)

    db.commit()
    db.refresh(batch)

    log_with_context(logger, "INFO", "Updated batch {}".format(batch.batch_code),
                     context={"batch_id": batch.id})
    return batch


def delete_batch(db: Session, batch_id: str) -> dict:
    """
    Delete a batch together with its enrollments and attendance.

    Returns the serialized batch as it was before deletion.
    """
    batch = get_batch(db, batch_id)
    snapshot = serialize_batch(batch)
    db.delete(batch)
    db.commit()

    log_with_context(logger, "INFO", "Deleted batch {}".format(snapshot["batchId"]),
                     context={"batch_id": batch_id})
    return snapshot

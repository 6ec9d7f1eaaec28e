# formstore/models.py
"""
Form storage database models

Tables:
- Entry: One stored form submission (bucket + JSON properties + creation time)
- FormDefinition: A form writing into a bucket, optionally localized per content dimension
- FormElement: The fields of a form definition (used to resolve column labels)
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from formstore.database import Base

# Bucket assigned to submissions whose form did not name one
UNDEFINED_BUCKET = "__undefined__"

BUCKET_MAX_LENGTH = 256

# JSONB on Postgres, plain JSON elsewhere (SQLite in tests)
JSONType = JSON().with_variant(JSONB(), "postgresql")


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(UTC).replace(tzinfo=None)


# -----------------------------------------------------------------------------
# Entry
# -----------------------------------------------------------------------------


class Entry(Base):
    """
    One stored form submission.

    Entries are append-only: bucket and created_at are set once at write time
    and never updated. Read paths (listing, export) build new structures from
    `properties` and never write them back.
    """

    __tablename__ = "form_entries"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    bucket = Column(String(BUCKET_MAX_LENGTH), nullable=False)
    properties = Column(JSONType, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("length(bucket) > 0", name="ck_form_entries_bucket_not_empty"),
        Index("ix_form_entries_bucket", "bucket"),
        Index("ix_form_entries_bucket_created_at", "bucket", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Entry {self.id} bucket={self.bucket!r} created_at={self.created_at}>"


# -----------------------------------------------------------------------------
# Form schema
# -----------------------------------------------------------------------------


class FormDefinition(Base):
    """
    A form whose storage step writes into `identifier` (the bucket).

    `dimensions` maps a content dimension axis to the value this variant was
    authored in, e.g. {"language": "de"}. Empty means not localized.
    """

    __tablename__ = "form_definitions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    identifier = Column(String(BUCKET_MAX_LENGTH), nullable=False, index=True)
    dimensions = Column(JSONType, nullable=False, default=dict)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    elements = relationship(
        "FormElement",
        back_populates="definition",
        cascade="all, delete-orphan",
        order_by="FormElement.position",
    )


class FormElement(Base):
    """A single field of a form definition."""

    __tablename__ = "form_elements"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    definition_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("form_definitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    node_identifier = Column(String(255), nullable=False)  # stable internal id
    speaking_identifier = Column(String(255), nullable=True)  # e.g. "email"
    label = Column(String(512), nullable=True)  # e.g. "E-Mail address"
    type_name = Column(String(255), nullable=False)  # e.g. "Neos.Form.Builder:SingleLineText"
    position = Column(Integer, nullable=False, default=0)

    definition = relationship("FormDefinition", back_populates="elements")

"""SQLAlchemy models for all database tables."""

from datetime import date, datetime
from typing import Any, Optional

from sqlalchemy import (
    BigInteger,
    Boolean,
    Date,
    Enum as SAEnum,
    ForeignKey,
    Integer,
    String,
    Text,
    TIMESTAMP,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from permit_buddy.core.database import Base
from permit_buddy.database.enums import DocumentCategory, DocumentStatus


class TimestampMixin:
    """Creation and modification timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class User(TimestampMixin, Base):
    """Local mirror of a Supabase Auth user."""

    __tablename__ = "users"

    # Supabase user id (the JWT ``sub`` claim)
    id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    businesses: Mapped[list["Business"]] = relationship(
        "Business", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )


class BusinessType(Base):
    """Lookup table of free-text business types (restaurant, food truck...)."""

    __tablename__ = "business_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)


class Jurisdiction(Base):
    """Lookup table of municipalities, counties and states."""

    __tablename__ = "jurisdictions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)


class PermitType(Base):
    """Lookup table of permit types."""

    __tablename__ = "permit_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)


class IssuingAuthority(Base):
    """Lookup table of agencies that issue permits."""

    __tablename__ = "issuing_authorities"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False, index=True)


class Business(TimestampMixin, Base):
    """A company owned by a user."""

    __tablename__ = "businesses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(
        String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String, nullable=False)
    business_type_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("business_types.id", ondelete="SET NULL"), nullable=True
    )
    jurisdiction_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("jurisdictions.id", ondelete="SET NULL"), nullable=True
    )
    phone: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped["User"] = relationship("User", back_populates="businesses")
    business_type: Mapped[Optional["BusinessType"]] = relationship("BusinessType", lazy="selectin")
    jurisdiction: Mapped[Optional["Jurisdiction"]] = relationship("Jurisdiction", lazy="selectin")
    documents: Mapped[list["BusinessDocument"]] = relationship(
        "BusinessDocument", back_populates="business", cascade="all, delete-orphan", passive_deletes=True
    )


class BusinessDocument(TimestampMixin, Base):
    """A permit, license or other regulatory document held by a business."""

    __tablename__ = "business_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    business_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    document_category: Mapped[DocumentCategory] = mapped_column(
        SAEnum(DocumentCategory, name="document_category"),
        nullable=False,
        default=DocumentCategory.PERMIT,
    )
    permit_type_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("permit_types.id", ondelete="SET NULL"), nullable=True
    )
    issuing_authority_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("issuing_authorities.id", ondelete="SET NULL"), nullable=True
    )
    jurisdiction_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("jurisdictions.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String, nullable=False)
    permit_number: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    auto_renew: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[DocumentStatus] = mapped_column(
        SAEnum(DocumentStatus, name="document_status"),
        nullable=False,
        default=DocumentStatus.ACTIVE,
    )
    raw_extraction_json: Mapped[Optional[Any]] = mapped_column(JSONB(none_as_null=True), nullable=True)

    # Reference to the uploaded file in object storage
    source_file_bucket: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    source_file_path: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    source_file_content_type: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    source_file_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    source_file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)

    business: Mapped["Business"] = relationship("Business", back_populates="documents")
    permit_type: Mapped[Optional["PermitType"]] = relationship("PermitType", lazy="selectin")
    issuing_authority: Mapped[Optional["IssuingAuthority"]] = relationship("IssuingAuthority", lazy="selectin")
    jurisdiction: Mapped[Optional["Jurisdiction"]] = relationship("Jurisdiction", lazy="selectin")

"""Enumerations shared by the ORM models and API schemas."""

from enum import Enum


class DocumentCategory(str, Enum):
    """Kind of regulatory document."""

    PERMIT = "PERMIT"
    LICENSE = "LICENSE"
    INSPECTION = "INSPECTION"
    INSURANCE = "INSURANCE"
    REGISTRATION = "REGISTRATION"
    CERTIFICATION = "CERTIFICATION"
    AGREEMENT = "AGREEMENT"
    OTHER = "OTHER"


class DocumentStatus(str, Enum):
    """Lifecycle state of a permit or license."""

    PENDING_ACTIVATION = "PENDING_ACTIVATION"
    ACTIVE = "ACTIVE"
    PENDING_RENEWAL = "PENDING_RENEWAL"
    EXPIRED = "EXPIRED"
    INACTIVE = "INACTIVE"

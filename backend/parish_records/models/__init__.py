# backend/parish_records/models/__init__.py
"""
Central model registry.

Import this once (the SQL and Cassandra stores do) so every mapped class is
registered on ``Base.metadata``. ``MODELS`` maps collection name -> ORM class.
"""
from typing import Dict, Type

from parish_records.db import Base  # re-export Base

from .analytics import AnalyticsMetric, AppSetting, CorrectionTicket  # noqa: F401
from .audit_log import AuditLog  # noqa: F401
from .donations import Donation  # noqa: F401
from .events import Booking, Event  # noqa: F401
from .notifications import Notification  # noqa: F401
from .records import BaptismRecord, ConfirmationRecord, DeathRecord, MarriageRecord, Record  # noqa: F401
from .requests import (  # noqa: F401
    BaptismRequest,
    CertificateRequest,
    ConfirmationRequest,
    DeathRequest,
    MarriageRequest,
)
from .users import PrivacyConsentLog, User  # noqa: F401

MODELS: Dict[str, Type[Base]] = {
    mapper.class_.__tablename__: mapper.class_ for mapper in Base.registry.mappers
}

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Enum, ForeignKey, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _new_id():
    return str(uuid.uuid4())


def _utcnow():
    return datetime.now(timezone.utc)


class OverviewStatus(str, enum.Enum):
    # PENDING is never written by the generator; rows that carry it are treated like FAILED
    PENDING = "PENDING"
    RUNNING = "RUNNING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class Target(Base):
    """A site whose brand profile is generated."""
    __tablename__ = 'targets'

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String, nullable=False)
    tracked_brand = Column(String)
    website_url = Column(String)
    brand_profile = Column(JSON)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


class BrandOverview(Base):
    """The single generation record per target."""
    __tablename__ = 'brand_overviews'

    id = Column(String(36), primary_key=True, default=_new_id)
    target_id = Column(String(36), ForeignKey('targets.id', ondelete='CASCADE'), unique=True, nullable=False)
    source_url = Column(String, nullable=False)
    status = Column(Enum(OverviewStatus, native_enum=False, length=16), nullable=False, index=True)
    summary = Column(Text)
    structured_profile = Column(JSON)
    warnings = Column(Text)
    error = Column(Text)
    created_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'target_id': self.target_id,
            'source_url': self.source_url,
            'status': self.status.value if self.status else None,
            'summary': self.summary,
            'structured_profile': self.structured_profile,
            'warnings': self.warnings,
            'error': self.error,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

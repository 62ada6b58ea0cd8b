from datetime import datetime
import enum

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)

from osce_admin.dependencies.database import Base


class ParticipantKind(enum.Enum):
    EXAMINER = "examiner"
    EXAMINEE = "examinee"
    CLIENT = "client"


class Administration(Base):
    __tablename__ = "administrations"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    # Ordered track ids, written once all tracks of the administration exist
    track_ids = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Track(Base):
    __tablename__ = "tracks"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    administration_id = Column(Integer, ForeignKey("administrations.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Station(Base):
    __tablename__ = "stations"
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    track_id = Column(Integer, ForeignKey("tracks.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Examiner(Base):
    __tablename__ = "examiners"
    id = Column(Integer, primary_key=True)
    examiner_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Examinee(Base):
    __tablename__ = "examinees"
    id = Column(Integer, primary_key=True)
    examinee_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Client(Base):
    """Standardized client (simulated patient) taking part in stations."""

    __tablename__ = "clients"
    id = Column(Integer, primary_key=True)
    client_id = Column(String(50), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class Feedback(Base):
    __tablename__ = "feedback"
    __table_args__ = (CheckConstraint("rate BETWEEN 1 AND 5", name="ck_feedback_rate_range"),)
    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    feedback = Column(Text, nullable=False)
    rate = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

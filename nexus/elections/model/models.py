"""
SQLAlchemy Models for the elections module.
"""

from __future__ import annotations

from sqlalchemy.orm import relationship
from sqlalchemy import Column, ForeignKey, UniqueConstraint
from sqlalchemy.types import Boolean, Integer, String, Text, Enum, DateTime, JSON

from nexus.elections import utils
from nexus.elections.exceptions import Conflict, InvalidState
from nexus.elections.model.enums import ElectionStatusEnum, CandidateStatusEnum

from nexus.database import Base


DEFAULT_REJECTION_REASON = "No reason provided"


class Election(Base):
    __tablename__ = "nexus_election"

    id = Column(String(36), primary_key=True, default=utils.generate_id)
    created_by = Column(String(36), ForeignKey("auth_user.id"), nullable=True)

    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    status = Column(Enum(ElectionStatusEnum), nullable=False, default=ElectionStatusEnum.upcoming)
    positions = Column(JSON, nullable=False, default=list)
    is_public = Column(Boolean, nullable=False, default=True)

    vote_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=utils.tz_now)
    updated_at = Column(DateTime(timezone=True), default=utils.tz_now, onupdate=utils.tz_now)

    # One-to-many relationships
    candidates = relationship("Candidate", cascade="all, delete", back_populates="election")
    logs = relationship("ElectionLog", cascade="all, delete", backref="nexus_election")

    def accepts_applications(self):
        return self.status in (ElectionStatusEnum.upcoming, ElectionStatusEnum.active)

    def is_active(self):
        return self.status == ElectionStatusEnum.active

    def is_completed(self):
        return self.status == ElectionStatusEnum.completed

    def start(self):
        if self.status != ElectionStatusEnum.upcoming:
            raise InvalidState(f"Only upcoming elections can be started, this election is {self.status.value}")

        return {
            "status": ElectionStatusEnum.active,
        }

    def end(self):
        if self.status != ElectionStatusEnum.active:
            raise InvalidState(f"Only active elections can be ended, this election is {self.status.value}")

        return {
            "status": ElectionStatusEnum.completed,
        }


class Candidate(Base):
    __tablename__ = "nexus_candidate"
    __table_args__ = (
        UniqueConstraint("election_id", "applicant_id", "position", name="uq_candidate_application"),
    )

    id = Column(String(36), primary_key=True, default=utils.generate_id)
    election_id = Column(
        String(36),
        ForeignKey("nexus_election.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )

    applicant_id = Column(String(36), nullable=False)
    applicant_name = Column(String(200), nullable=False)
    department = Column(String(200), nullable=True)
    year = Column(String(50), nullable=True)

    position = Column(String(100), nullable=False)
    manifesto = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=True)

    status = Column(Enum(CandidateStatusEnum), nullable=False, default=CandidateStatusEnum.pending)
    vote_count = Column(Integer, nullable=False, default=0)

    submitted_at = Column(DateTime(timezone=True), default=utils.tz_now)
    updated_at = Column(DateTime(timezone=True), default=utils.tz_now, onupdate=utils.tz_now)

    reviewed_by = Column(String(36), nullable=True)
    reviewed_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    election = relationship("Election", back_populates="candidates")

    def is_pending(self):
        return self.status == CandidateStatusEnum.pending

    def is_approved(self):
        return self.status == CandidateStatusEnum.approved

    def check_pending(self):
        if not self.is_pending():
            raise Conflict(f"This application has already been {self.status.value}")

    def approve(self, reviewer_id: str):
        self.check_pending()
        return {
            "status": CandidateStatusEnum.approved,
            "reviewed_by": reviewer_id,
            "reviewed_at": utils.tz_now(),
        }

    def reject(self, reviewer_id: str, reason: str | None = None):
        self.check_pending()
        return {
            "status": CandidateStatusEnum.rejected,
            "reviewed_by": reviewer_id,
            "reviewed_at": utils.tz_now(),
            "rejection_reason": reason or DEFAULT_REJECTION_REASON,
        }


class Vote(Base):
    __tablename__ = "nexus_vote"
    __table_args__ = (
        UniqueConstraint("election_id", "voter_id", name="uq_vote_once_per_voter"),
    )

    id = Column(String(36), primary_key=True, default=utils.generate_id)
    election_id = Column(
        String(36),
        ForeignKey("nexus_election.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    candidate_id = Column(
        String(36),
        ForeignKey("nexus_candidate.id", onupdate="CASCADE", ondelete="CASCADE"),
        nullable=False,
    )
    voter_id = Column(String(36), nullable=False)

    cast_at = Column(DateTime(timezone=True), default=utils.tz_now)


class ElectionLog(Base):
    __tablename__ = "election_logs"

    id = Column(Integer, primary_key=True, index=True)
    election_id = Column(
        String(36),
        ForeignKey("nexus_election.id",
                   onupdate="CASCADE", ondelete="CASCADE"),
    )

    log_level = Column(String(200), nullable=False)

    event = Column(String(200), nullable=False)
    event_params = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utils.tz_now)

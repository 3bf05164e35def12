"""
Pydantic schemas (FastAPI) for the elections module.

Let 'TestModel' be a SQLAlchemy model, the API can:
    - Create/modify an instance of TestModel.
    - Out an instance of TestModel.

To achieve this we create up to 3 schemas:
    - TestModelBase: holds the common data from both creating and
      returning an instance of TestModel.

    - TestModelIn: inherits from TestModelBase and contains the
      specific data needed to create/modify an instance of TestModel.

    - TestModelOut: inherits from TestModelBase and contains the data
      that we want the API to return to the user. Rows read from the
      store go through these before leaving a service, so a malformed
      row fails loudly instead of leaking out.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nexus.elections import utils
from nexus.elections.model.enums import ElectionStatusEnum, CandidateStatusEnum

from typing import List


class NexusSchema(BaseModel):
    """
    Base class for a Nexus schema.
    """

    model_config = ConfigDict(str_strip_whitespace=True)


def _clean_positions(positions):
    if positions is None:
        return positions
    cleaned = [p.strip() for p in positions if p and p.strip()]
    if len(set(cleaned)) != len(cleaned):
        raise ValueError("positions must be unique")
    return cleaned


#  Election-related schemas


class ElectionBase(NexusSchema):
    """
    Basic election schema.
    """

    title: str = Field(min_length=5, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    start_date: datetime
    end_date: datetime
    positions: List[str] = Field(min_length=1)
    is_public: bool = True

    @field_validator("start_date", "end_date")
    @classmethod
    def check_timezone(cls, value):
        return utils.as_utc(value)


class ElectionIn(ElectionBase):
    """
    Schema for creating an election.
    """

    @field_validator("positions")
    @classmethod
    def check_positions(cls, positions):
        cleaned = _clean_positions(positions)
        if not cleaned:
            raise ValueError("at least one position is required")
        return cleaned

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class ElectionUpdate(NexusSchema):
    """
    Schema for partially updating an election, every field is optional.
    """

    title: str | None = Field(default=None, min_length=5, max_length=100)
    description: str | None = Field(default=None, min_length=10, max_length=1000)
    start_date: datetime | None = None
    end_date: datetime | None = None
    positions: List[str] | None = None
    is_public: bool | None = None
    status: ElectionStatusEnum | None = None

    @field_validator("start_date", "end_date")
    @classmethod
    def check_timezone(cls, value):
        return utils.as_utc(value)

    @field_validator("positions")
    @classmethod
    def check_positions(cls, positions):
        cleaned = _clean_positions(positions)
        if cleaned is not None and not cleaned:
            raise ValueError("at least one position is required")
        return cleaned


class ElectionOut(ElectionBase):
    """
    Schema for reading/returning election data
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    status: ElectionStatusEnum
    created_by: str | None = None
    vote_count: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None


#  Candidate-related schemas


class CandidateBase(NexusSchema):
    """
    Basic candidate schema.
    """

    position: str = Field(min_length=1, max_length=100)
    manifesto: str = Field(min_length=10, max_length=1000)
    image_url: str | None = Field(default=None, max_length=500)
    department: str | None = Field(default=None, max_length=200)
    year: str | None = Field(default=None, max_length=50)


class CandidateIn(CandidateBase):
    """
    Schema for applying as a candidate.
    """

    applicant_name: str | None = Field(default=None, max_length=200)


class CandidateUpdate(NexusSchema):
    """
    Schema for editing a pending application.
    """

    manifesto: str | None = Field(default=None, min_length=10, max_length=1000)
    image_url: str | None = Field(default=None, max_length=500)
    department: str | None = Field(default=None, max_length=200)
    year: str | None = Field(default=None, max_length=50)


class CandidateReject(NexusSchema):
    reason: str | None = Field(default=None, max_length=1000)


class CandidateOut(CandidateBase):
    """
    Schema for reading/returning candidate data.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    election_id: str
    applicant_id: str
    applicant_name: str
    status: CandidateStatusEnum
    vote_count: int = 0
    submitted_at: datetime | None = None
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    rejection_reason: str | None = None


#  Vote-related schemas


class VoteIn(NexusSchema):
    """
    Schema for casting a vote.
    """

    candidate_id: str = Field(min_length=1)


class VoteOut(NexusSchema):
    """
    Schema for reading/returning vote data.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    election_id: str
    candidate_id: str
    cast_at: datetime | None = None


class VoteStatus(NexusSchema):
    has_voted: bool
    candidate_id: str | None = None


#  Results-related schemas


class CandidateResult(NexusSchema):
    id: str
    applicant_name: str
    position: str
    vote_count: int
    percentage: float


class ElectionResults(NexusSchema):
    election_id: str
    title: str
    status: ElectionStatusEnum
    total_votes: int
    candidates: List[CandidateResult] = []


#  Log-related schemas


class ElectionLogOut(NexusSchema):

    model_config = ConfigDict(from_attributes=True)

    id: int
    log_level: str
    event: str
    event_params: str
    created_at: datetime | None = None

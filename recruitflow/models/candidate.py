"""
Candidate model.

Minimal identity record as resolved by the candidate directory. Temp
candidates were sourced but not yet promoted to a full candidate record.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from recruitflow.models.base_model import TimestampedModel


class Candidate(TimestampedModel):
    """Candidate identity table."""

    __tablename__ = "candidates"

    full_name: Mapped[str] = mapped_column(String(200), nullable=False)

    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    profile_link: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # TempCandidateFlag: blocks stage transitions until cleared
    is_temp: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    promoted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

"""SQLAlchemy ORM models for the experience log read by the engine"""

import uuid
from sqlalchemy import Column, String, BigInteger, DateTime, Integer, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class DiningExperience(Base):
    """Logged dining experience (one meal and its cost)"""

    __tablename__ = "dining_experience"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(Text, nullable=False, index=True)
    cost_cents = Column(BigInteger, nullable=False)
    occurred_at = Column(DateTime, nullable=False, index=True)
    meal_type = Column(Text, nullable=False)
    restaurant_name = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserPreferences(Base):
    """Budget profile captured at onboarding"""

    __tablename__ = "user_preferences"

    user_id = Column(Text, primary_key=True)
    weekly_budget_cents = Column(BigInteger, nullable=False, default=20_000)
    meal_frequency_per_day = Column(Integer, nullable=False, default=3)
    budget_level = Column(Integer, nullable=False, default=2)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

from sqlalchemy import Boolean, Column, DateTime, Enum, Float, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import relationship
from .db import Base


PROFILE_TYPES = ("client", "contractor", "admin")
CONTRACT_STATUSES = ("new", "in_progress", "terminated")


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    profession = Column(String(255), nullable=False)
    balance = Column(Float, nullable=False, default=0.0)
    type = Column(Enum(*PROFILE_TYPES, name="profile_type"), nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    client_contracts = relationship("Contract", foreign_keys="Contract.client_id", back_populates="client")
    contractor_contracts = relationship("Contract", foreign_keys="Contract.contractor_id", back_populates="contractor")


class Contract(Base):
    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    terms = Column(Text, nullable=False)
    status = Column(Enum(*CONTRACT_STATUSES, name="contract_status"), nullable=False, default="new")
    client_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    contractor_id = Column(Integer, ForeignKey("profiles.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    client = relationship("Profile", foreign_keys=[client_id], back_populates="client_contracts")
    contractor = relationship("Profile", foreign_keys=[contractor_id], back_populates="contractor_contracts")
    jobs = relationship("Job", back_populates="contract")


class Job(Base):
    __tablename__ = "jobs"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    paid = Column(Boolean, nullable=False, default=False)
    payment_date = Column(DateTime, nullable=True)
    deposit_paid = Column(Boolean, nullable=False, default=False)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    contract = relationship("Contract", back_populates="jobs")

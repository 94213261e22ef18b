from sqlalchemy import Column, DateTime, Integer, JSON, String, Text, func
from sqlalchemy.orm import relationship

from database import Base


class Loan(Base):
    __tablename__ = "loans"

    id = Column(String(64), primary_key=True, index=True)
    loan_number = Column(String(64), unique=True, nullable=False, index=True)
    borrower_name = Column(String(256), nullable=False)
    borrower_entity_name = Column(String(256), nullable=True)
    property_address = Column(Text, nullable=False)
    # single_family, duplex, triplex, quadplex, condo, multi_family_5plus, commercial
    property_type = Column(String(64), nullable=False, default="single_family")
    estimated_value = Column(Integer, nullable=True)
    loan_amount = Column(String(64), nullable=True)
    loan_to_value = Column(Integer, nullable=True)
    loan_type = Column(String(64), nullable=False, default="DSCR")
    loan_purpose = Column(String(64), nullable=False)
    funder = Column(String(128), nullable=False, index=True)
    status = Column(String(32), nullable=False, default="in_progress", index=True)
    target_close_date = Column(String(32), nullable=True)
    processor_id = Column(String(64), nullable=True, index=True)
    completion_percentage = Column(Integer, nullable=False, default=0)
    # Requirement names, set semantics; reassign the whole list on change
    completed_requirements = Column(JSON, nullable=False, default=list)
    # Requirement name -> list of document ids
    document_assignments = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    documents = relationship("Document", back_populates="loan", cascade="all, delete-orphan")
    contacts = relationship("Contact", back_populates="loan", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="loan", cascade="all, delete-orphan")
    messages = relationship(
        "Message", back_populates="loan", cascade="all, delete-orphan", order_by="Message.id"
    )

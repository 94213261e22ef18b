from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import relationship

from database import Base


class Document(Base):
    __tablename__ = "documents"

    id = Column(String(64), primary_key=True, index=True)
    loan_id = Column(String(64), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(512), nullable=False)
    # Storage-backend identifier (Drive file id, upload key, ...)
    file_id = Column(String(256), nullable=False)
    file_type = Column(String(128), nullable=True)
    file_size = Column(Integer, nullable=True)
    category = Column(String(64), nullable=True)
    status = Column(String(32), nullable=False, default="pending")
    source = Column(String(32), nullable=False, default="upload")
    # Soft delete keeps history for duplicate detection
    deleted = Column(Boolean, nullable=False, default=False, index=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    loan = relationship("Loan", back_populates="documents")

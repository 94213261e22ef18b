from sqlalchemy import Boolean, Column, ForeignKey, String
from sqlalchemy.orm import relationship

from database import Base


class Contact(Base):
    __tablename__ = "contacts"

    id = Column(String(64), primary_key=True, index=True)
    loan_id = Column(String(64), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(256), nullable=False)
    email = Column(String(256), nullable=True)
    phone = Column(String(64), nullable=True)
    company = Column(String(256), nullable=True)
    # borrower, title, insurance, lender, analyst, appraiser, attorney, other
    role = Column(String(32), nullable=False, index=True)
    is_analyst = Column(Boolean, nullable=False, default=False)

    loan = relationship("Loan", back_populates="contacts")

"""SQLAlchemy Models for the transaction vault."""
from sqlalchemy import Column, DateTime, Index, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


class TransactionRow(Base):
    """One SecureRecord. Hex fields are stored as text, verbatim."""
    __tablename__ = "transactions"

    id = Column(String(64), primary_key=True)
    party_id = Column(Text, nullable=False)
    created_at = Column(Text, nullable=False)  # ISO-8601 string from the record

    payload_nonce = Column(Text, nullable=False)
    payload_ct = Column(Text, nullable=False)
    payload_tag = Column(Text, nullable=False)

    dek_wrap_nonce = Column(Text, nullable=False)
    dek_wrapped = Column(Text, nullable=False)
    dek_wrap_tag = Column(Text, nullable=False)

    alg = Column(String(32), nullable=False)
    mk_version = Column(Integer, nullable=False)

    # Insert time, used for newest-first listing
    created_timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        Index("idx_transactions_party_id", "party_id"),
        Index("idx_transactions_created_at", "created_at"),
        Index("idx_transactions_created_timestamp", "created_timestamp"),
    )

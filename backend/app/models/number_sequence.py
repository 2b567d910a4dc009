"""
Named counters for human-readable document numbers.
"""

from sqlalchemy import Column, Integer, String
from backend.app.db.session import Base


class NumberSequence(Base):
    """Incremented atomically in SQL; read back within the same transaction."""
    __tablename__ = "number_sequences"

    name = Column(String(50), primary_key=True)
    value = Column(Integer, default=0, nullable=False)

    def __repr__(self):
        return f"<NumberSequence(name='{self.name}', value={self.value})>"

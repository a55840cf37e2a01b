from __future__ import annotations

from sqlalchemy import Column, Integer, Text

from ..db.session import Base


class Computer(Base):
    """One tracked computer.

    ``warranty_expiry`` is free text; see ``core.warranty`` for the formats
    that are understood. ``status`` is ``active``, ``repair``, ``retired`` or
    empty.
    """

    __tablename__ = "computers"

    id = Column(Integer, primary_key=True, index=True)
    device_name = Column(Text, nullable=False, index=True)
    serial_number = Column(Text, nullable=False, index=True)
    model = Column(Text, nullable=True)
    user_name = Column(Text, nullable=True)
    status = Column(Text, nullable=True)
    warranty_expiry = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(Text, nullable=False)
    updated_at = Column(Text, nullable=True)

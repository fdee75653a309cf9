"""Client model: a monitored organization owned by one admin"""
from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, Integer, String, Text

from mssp_console.database import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    url = Column(String(1024), nullable=False)
    description = Column(Text, nullable=False, default="")
    graylog = Column(JSON, nullable=True)       # {host, streamId, username, password}
    log_api = Column(JSON, nullable=True)
    admin_id = Column(String(100), nullable=False, index=True)   # owning admin username
    created_at = Column(DateTime, default=datetime.utcnow)

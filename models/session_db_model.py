from sqlalchemy import Column, DateTime, JSON, String
from database import Base

class SessionDB(Base):
    __tablename__ = "sessions"

    session_id = Column(String, primary_key=True, index=True)
    data = Column(JSON, default=dict)
    expires_at = Column(DateTime, index=True)

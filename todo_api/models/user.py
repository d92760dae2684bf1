from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from todo_api.database import Base

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)

    tasks = relationship("Task", back_populates="owner", cascade="all, delete-orphan")

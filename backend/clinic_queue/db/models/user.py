# clinic_queue/db/models/user.py
from sqlalchemy import Column, Integer, String
from clinic_queue.db.base import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column("password", String(255), nullable=False)
    role = Column(String(50), nullable=False, default="user")  # 'admin', 'user'

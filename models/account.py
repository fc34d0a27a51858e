from models.base_model import Base, BaseModel
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

USER = "USER"
ADMIN = "ADMIN"
ROLES = (USER, ADMIN)

# Stored in refresh_token on logout; never a valid JWT (no dot-separated segments)
LOGGED_OUT = "loggedOut"


class Account(BaseModel, Base):
    __tablename__ = "accounts"
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    role = Column(String(16), nullable=False, default=USER)
    refresh_token = Column(String(1024), nullable=True, index=True)

    runs = relationship(
        "Run",
        back_populates="account",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


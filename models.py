from sqlalchemy import Column, String, Integer
from db import Base


class ShortLink(Base):
    __tablename__ = "short_links"

    id = Column(Integer, primary_key=True, autoincrement=True)
    original_url = Column(String(2048), nullable=False, index=True)
    # count + 1 at creation; unique so concurrent writers cannot share a code
    short_code = Column(Integer, nullable=False, default=0, unique=True, index=True)

import logging
import re
from typing import Optional, Union

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from errors import StoreFailure
from models import ShortLink

logger = logging.getLogger("url_shortener.store")

SHORT_CODE_RE = re.compile(r"^[0-9]+\Z")
# largest value a signed 64-bit integer column holds
MAX_SHORT_CODE = 2**63 - 1


class URLStore:
    """Persistence for ShortLink records over one injected session.

    Every store error is re-raised as StoreFailure; nothing is retried except
    a short code collision in create_next.
    """

    def __init__(self, session: AsyncSession, retry_times: int = 3):
        self.session = session
        self.retry_times = retry_times

    async def find_by_original_url(self, url: str) -> Optional[ShortLink]:
        try:
            result = await self.session.execute(select(ShortLink).where(ShortLink.original_url == url))
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreFailure("find_by_original_url", e) from e

    async def find_by_short_code(self, code: Union[str, int]) -> Optional[ShortLink]:
        if isinstance(code, str):
            if not SHORT_CODE_RE.match(code):
                logger.debug(f"Short code {code!r} is not an integer")
                return None
            code = int(code)
        if not 0 <= code <= MAX_SHORT_CODE:
            logger.debug(f"Short code {code} is out of range")
            return None
        try:
            result = await self.session.execute(select(ShortLink).where(ShortLink.short_code == code))
            return result.scalars().first()
        except SQLAlchemyError as e:
            raise StoreFailure("find_by_short_code", e) from e

    async def count(self) -> int:
        try:
            result = await self.session.execute(select(func.count()).select_from(ShortLink))
            return result.scalar_one()
        except SQLAlchemyError as e:
            raise StoreFailure("count", e) from e

    async def create_next(self, original_url: str) -> ShortLink:
        if not original_url:
            raise ValueError("original_url must not be empty")
        for attempt in range(self.retry_times + 1):
            count = await self.count()
            link = ShortLink(original_url=original_url, short_code=count + 1)
            self.session.add(link)
            try:
                await self.session.commit()
                await self.session.refresh(link)
            except IntegrityError as e:
                await self.session.rollback()
                logger.warning(f"Short code {count + 1} taken by a concurrent writer (attempt {attempt + 1})")
                if attempt == self.retry_times:
                    raise StoreFailure("create_next", e) from e
                existing = await self.find_by_original_url(original_url)
                if existing:
                    return existing
                continue
            except SQLAlchemyError as e:
                await self.session.rollback()
                raise StoreFailure("create_next", e) from e
            return link

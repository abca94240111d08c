import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Depends, Form, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from config import CREATE_RETRIES, LOG_LEVEL, LOOKUP_TIMEOUT, PORT
from db import engine, get_db
from errors import InvalidURL, NotFound, StoreFailure
from models import ShortLink
from schemas import ErrorResponse, ShortenResponse
from store import URLStore
from validator import HostnameValidator

logging.basicConfig(level=LOG_LEVEL)
logger = logging.getLogger("url_shortener")

LANDING_PAGE = """<!DOCTYPE html>
<html>
  <head><title>URL Shortener Microservice</title></head>
  <body>
    <h1>URL Shortener Microservice</h1>
    <form action="/api/shorturl" method="POST">
      <label for="url_input">URL:</label>
      <input id="url_input" type="text" name="url" placeholder="https://www.example.com">
      <input type="submit" value="POST URL">
    </form>
    <p>Visit <code>/api/shorturl/&lt;short_url&gt;</code> to be redirected to the original URL.</p>
  </body>
</html>
"""


@asynccontextmanager
async def lifespan(_: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(ShortLink.metadata.create_all)
    yield
    await engine.dispose()


app = FastAPI(title="URL Shortener Microservice", description="Shortens URLs whose hostname resolves.", lifespan=lifespan)

hostname_validator = HostnameValidator(timeout=LOOKUP_TIMEOUT)


def get_validator() -> HostnameValidator:
    return hostname_validator


async def get_store(db: AsyncSession = Depends(get_db)) -> URLStore:
    return URLStore(db, retry_times=CREATE_RETRIES)


@app.exception_handler(InvalidURL)
async def invalid_url_handler(request: Request, exc: InvalidURL):
    return JSONResponse(ErrorResponse(error=exc.public_message).model_dump())


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(ErrorResponse(error=exc.public_message).model_dump())


@app.exception_handler(StoreFailure)
async def store_failure_handler(request: Request, exc: StoreFailure):
    logger.error(f"[{exc.kind}] {request.method} {request.url.path}: {exc}", exc_info=exc.original)
    return JSONResponse(ErrorResponse(error=exc.public_message).model_dump(), status_code=500)


@app.get("/", response_class=HTMLResponse, include_in_schema=False)
def landing_page():
    return LANDING_PAGE


@app.get("/health")
def health_check():
    logger.info("Health check endpoint called.")
    return {"status": "ok"}


async def shorten(raw_url: str, validator: HostnameValidator, store: URLStore) -> ShortenResponse:
    try:
        hostname = await validator.validate(raw_url)
    except InvalidURL as e:
        logger.warning(f"[{e.kind}] Rejected url={raw_url}: {e}")
        raise
    found = await store.find_by_original_url(raw_url)
    if found:
        logger.info(f"url={raw_url} already shortened as {found.short_code}")
        return ShortenResponse(original_url=found.original_url, short_url=found.short_code)
    record = await store.create_next(raw_url)
    logger.info(f"Created short_url={record.short_code} for url={raw_url} (host {hostname})")
    return ShortenResponse(original_url=record.original_url, short_url=record.short_code)


@app.post("/api/shorturl", response_model=ShortenResponse)
async def shorten_url(
    url: str = Form(""),
    validator: HostnameValidator = Depends(get_validator),
    store: URLStore = Depends(get_store),
):
    logger.info(f"Shorten API called with url={url}")
    return await shorten(url, validator, store)


@app.get("/api/shorturl/{shorturl}")
async def resolve_short_url(shorturl: str, store: URLStore = Depends(get_store)):
    logger.info(f"Redirect API called with short_url={shorturl}")
    found = await store.find_by_short_code(shorturl)
    if not found:
        logger.warning(f"Redirect failed: short_url={shorturl} not found")
        raise NotFound(shorturl)
    logger.info(f"Redirecting to url={found.original_url} for short_url={shorturl}")
    return RedirectResponse(found.original_url, status_code=302)


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=PORT, log_level=LOG_LEVEL.lower())

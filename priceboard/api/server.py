# priceboard/api/server.py

"""HTTP API exposing the canonical price list.

``GET`` returns ``{data, updatedAt}``.  ``PUT`` takes ``{data}`` and
replaces the whole list.  Store failures become generic 500 bodies so no
internal detail leaks and the server keeps running.
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from priceboard.config.settings import Settings
from priceboard.models.errors import ValidationError
from priceboard.storage.price_store import PriceStore

logger = logging.getLogger("priceboard.api")

_INVALID = {"error": "Invalid data format"}


def create_app(store: PriceStore | None = None) -> FastAPI:
    """Build the API around *store* (a default SQLite store if omitted)."""
    price_store = store or PriceStore()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        yield
        price_store.close()
        logger.info("API shut down, store closed")

    app = FastAPI(title="priceboard", lifespan=lifespan)
    app.state.store = price_store

    @app.get(Settings.API_PATH)
    async def read_prices() -> JSONResponse:
        try:
            snapshot = await asyncio.to_thread(price_store.read_all)
        except Exception:
            logger.error("GET %s failed", Settings.API_PATH, exc_info=True)
            return JSONResponse(
                {"error": "Failed to fetch prices"}, status_code=500,
            )
        return JSONResponse(snapshot.to_payload())

    @app.put(Settings.API_PATH)
    async def replace_prices(request: Request) -> JSONResponse:
        try:
            body = await request.json()
        except ValueError:
            return JSONResponse(_INVALID, status_code=400)

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list) or not data:
            return JSONResponse(_INVALID, status_code=400)

        try:
            snapshot = await asyncio.to_thread(price_store.replace_all, data)
        except ValidationError as exc:
            logger.warning("Rejected PUT payload: %s", exc)
            return JSONResponse(_INVALID, status_code=400)
        except Exception:
            logger.error("PUT %s failed", Settings.API_PATH, exc_info=True)
            return JSONResponse(
                {"error": "Failed to update prices"}, status_code=500,
            )
        return JSONResponse({"success": True, "data": snapshot.to_payload()})

    return app

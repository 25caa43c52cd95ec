import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pantrix.db.database import init_db
from pantrix.core.ai_assistant import RemoteCallError
from pantrix.core.cooked_food import AlreadyClaimedError, CookedFoodNotFoundError, OrderNotFoundError
from pantrix.core.donations import DonationNotFoundError, InvalidTransitionError
from pantrix.core.inventory import InventoryItemNotFoundError
from pantrix.core.shopping_list import ShoppingItemNotFoundError
from pantrix.core.state import DuplicateIdError, ValidationError
from app.routers import (
    assistant, cooked_food, demo, donations, inventory, notifications,
    requirements, session, settings, shopping,
)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    from demo.seed import seed_cooked_food, seed_if_empty
    from pantrix.core.state import AppState
    # Initialize main DB
    init_db()
    seed_if_empty()
    # Initialize and seed demo DB if DEMO_DB_URL is set
    demo_url = os.environ.get("DEMO_DB_URL")
    if demo_url:
        from pantrix.db.database import override_db_path
        with override_db_path(Path(demo_url)):
            init_db()
            seed_if_empty()
            seed_cooked_food(AppState())
    yield


app = FastAPI(lifespan=lifespan)


def _error(status_code: int, exc: Exception, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": str(exc), **extra})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error(422, exc, field=exc.field)


@app.exception_handler(DonationNotFoundError)
@app.exception_handler(CookedFoodNotFoundError)
@app.exception_handler(OrderNotFoundError)
@app.exception_handler(InventoryItemNotFoundError)
@app.exception_handler(ShoppingItemNotFoundError)
async def not_found_handler(request: Request, exc: Exception):
    return _error(404, exc)


@app.exception_handler(InvalidTransitionError)
@app.exception_handler(AlreadyClaimedError)
@app.exception_handler(DuplicateIdError)
async def conflict_handler(request: Request, exc: Exception):
    return _error(409, exc)


@app.exception_handler(RemoteCallError)
async def remote_error_handler(request: Request, exc: RemoteCallError):
    return _error(502, exc)


app.include_router(session.router)
app.include_router(inventory.router)
app.include_router(donations.router)
app.include_router(cooked_food.router)
app.include_router(notifications.router)
app.include_router(requirements.router)
app.include_router(shopping.router)
app.include_router(assistant.router)
app.include_router(settings.router)
app.include_router(demo.router)

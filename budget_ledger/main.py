import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from budget_ledger import db
from budget_ledger.errors import LedgerError
from budget_ledger.routers import (
    accounts,
    budgets,
    categories,
    forecast,
    transactions,
    users,
    workspaces,
)


def configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    await db.init_db()
    yield
    await db.dispose_engine()


app = FastAPI(lifespan=lifespan)


@app.exception_handler(LedgerError)
async def ledger_error_handler(_: Request, exc: LedgerError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": exc.kind, "context": exc.context},
    )


@app.get("/")
def read_root() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(users.router)
app.include_router(workspaces.router)
app.include_router(categories.router)
app.include_router(accounts.router)
app.include_router(transactions.router)
app.include_router(budgets.router)
app.include_router(forecast.router)

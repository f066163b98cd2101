"""FastAPI application entry point."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mortgage_calc.api.routes import mortgage
from mortgage_calc.config import settings

logging.basicConfig(level=settings.log_level)

app = FastAPI(
    title=settings.api_title,
    description="Mortgage amortization, prepayment and refinance calculator",
    version="0.1.0",
    debug=settings.debug,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(mortgage.router)


@app.get("/health")
async def health():
    return {"status": "ok"}

# Run from project root: uvicorn snippy.main:app --reload

import logging

from fastapi import FastAPI

from snippy.api.routes import router
from snippy.core.config import LOG_LEVEL
from snippy.mcp.server import mcp_router

logging.basicConfig(level=LOG_LEVEL)


app = FastAPI(title="Snippy")
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")

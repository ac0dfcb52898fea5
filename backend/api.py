from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from models_common import HealthStatus
from planning.api import router as production_schedule_router
from production_data.models import SessionLocal, init_db

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create tables on startup
init_db()

app = FastAPI(title="ShiftPlan – Production Scheduling")
app.include_router(production_schedule_router)
logger.info("Production Schedule API loaded successfully")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Endpoints
# -------------------------------

@app.get("/health", response_model=HealthStatus)
def health() -> Dict[str, Any]:
    db = SessionLocal()
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Database health check failed: {e}")
        database = "unavailable"
    finally:
        db.close()
    return {"status": "ok", "service": "shiftplan", "database": database}

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .db import Base, engine
from .routers import health, ingest, labels, members, reports, tasks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Taskboard ready (env=%s, tz=%s)", settings.app_env, settings.timezone)
    yield
    await engine.dispose()


app = FastAPI(title="Taskboard - Kanban Task Service", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
app.include_router(members.router, prefix="/members", tags=["members"])
app.include_router(labels.router, prefix="/labels", tags=["labels"])
app.include_router(reports.router, prefix="/reports", tags=["reports"])
app.include_router(ingest.router, prefix="/ingest", tags=["ingest"])


@app.get("/")
def root():
    return {"ok": True, "service": "taskboard", "version": "0.1.0"}

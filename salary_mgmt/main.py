import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salary_mgmt import __version__
from salary_mgmt.api import employee_routes, maintenance_routes, report_routes, upload_routes
from salary_mgmt.config import settings
from salary_mgmt.database import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield

app = FastAPI(title="Salary Management API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(employee_routes.router)
app.include_router(upload_routes.router)
app.include_router(maintenance_routes.router)
app.include_router(report_routes.router)

@app.get("/")
def health_check():
    return {"status": "online", "message": "Salary Management API is Running"}

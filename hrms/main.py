from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from hrms.api import activity_routes, dashboard_routes, organization_routes, score_routes, task_routes
from hrms.audit.activity_log import build_activity_notifier
from hrms.config import get_settings
from hrms.database import engine, init_db

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    app.state.activity_notifier = build_activity_notifier(settings, engine)
    yield

app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(organization_routes.router)
app.include_router(task_routes.router)
app.include_router(score_routes.router)
app.include_router(activity_routes.router)
app.include_router(dashboard_routes.router)

@app.get("/")
def health_check():
    notifier = getattr(app.state, "activity_notifier", None)
    return {
        "status": "online",
        "message": "HRMS Workforce API is Running",
        "activity_log": notifier.status() if notifier else None,
    }

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, SEED_ON_STARTUP
from .database import create_tables, get_session
from .errors import register_exception_handlers
from .logging import get_logger
from .routers import auth, tasks, users
from .seed import load_seed_data

logger = get_logger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Task Manager API",
    description="Task tracking API with role-based permissions and revocable bearer tokens",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(auth.router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["tasks"])
app.include_router(users.router, prefix="/api/v1/users", tags=["users"])

# Create tables and optionally seed on startup
@app.on_event("startup")
def on_startup():
    create_tables()
    if SEED_ON_STARTUP:
        with get_session() as session:
            load_seed_data(session)
    logger.info("startup_complete", seeded=SEED_ON_STARTUP)

@app.get("/")
def read_root():
    return {"message": "Task Manager API"}

@app.get("/health")
def health_check():
    return {"status": "healthy"}

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fastval.api.handlers import install_exception_handlers
from fastval.api.health import router as health_router
from fastval.api.root import router as root_router
from fastval.api.users import router as users_router
from fastval.core.config import settings
from fastval.core.logging_config import configure_logging

configure_logging()

app = FastAPI(title="fastval", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app, show_stack=settings.SHOW_STACK)

app.include_router(root_router)
app.include_router(health_router)
app.include_router(users_router)

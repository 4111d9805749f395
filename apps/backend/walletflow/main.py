from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api import register_routers
from .core.config import settings
from .core.logging import configure_logging

configure_logging()

app = FastAPI(title=settings.APP_NAME, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.get("/health")
def health():
    return {"status": "ok"}


register_routers(app)

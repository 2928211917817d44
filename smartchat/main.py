from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from smartchat.core.config import settings
from smartchat.core.errors import register_error_handlers
from smartchat.api.router import api_router
from smartchat.core.startup import lifespan

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Dashboard gate, Stripe billing and widget listing for SmartChat.",
    version=settings.VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

app.include_router(api_router, prefix=settings.API_PREFIX)


@app.get("/health")
async def health():
    return {"status": "ok", "version": settings.VERSION}

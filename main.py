import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from config import settings
from api.v1.router import api_router
from core.errors import (
    ProfileIncompleteError,
    UnsafeTargetError,
    UpstreamGenerationError,
    ValidationError,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
_LOG = logging.getLogger(__name__)


app = FastAPI(title="Fitplan API", version="1.0.0")

# CORS (public demo only – lock down in prod)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, prefix="/api/v1")


# ───────────────────────── error mapping ─────────────────────────
@app.exception_handler(ProfileIncompleteError)
async def _profile_incomplete(_: Request, exc: ProfileIncompleteError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Please complete your profile first", "missing": exc.missing},
    )


@app.exception_handler(ValidationError)
async def _invalid_input(_: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "errors": [e.as_dict() for e in exc.errors]},
    )


@app.exception_handler(UnsafeTargetError)
async def _unsafe_target(_: Request, exc: UnsafeTargetError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={"detail": str(exc), "calories": exc.calories, "floor": exc.floor},
    )


@app.exception_handler(UpstreamGenerationError)
async def _upstream(_: Request, exc: UpstreamGenerationError) -> JSONResponse:
    _LOG.warning("upstream generation error: %s", exc)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Failed to generate plan", "stage": exc.stage},
    )


@app.get("/health", tags=["meta"])
def health() -> dict[str, str]:
    return {"status": "ok", "env": settings.env_name}

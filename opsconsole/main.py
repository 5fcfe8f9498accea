from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import sys
import uvicorn
from opsconsole.routers import templates, vms
from opsconsole.core.config import settings
from opsconsole.core.errors import MissingConfigurationError, RequestValidationFailed, UpstreamError
from opsconsole.core.log_setup import configure_logging

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    missing = settings.missing_credentials()
    if missing:
        raise MissingConfigurationError(missing)
    logger.info("Ops console API ready")
    yield

app = FastAPI(
    title="Ops Console API",
    description="Azure VM inventory, power control and dev environment provisioning",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vms.router, tags=["vms"])
app.include_router(templates.router, prefix="/template", tags=["templates"])

@app.exception_handler(RequestValidationFailed)
async def validation_failed_handler(request: Request, exc: RequestValidationFailed):
    return JSONResponse(status_code=400, content={"success": False, "message": exc.message})

@app.exception_handler(UpstreamError)
async def upstream_error_handler(request: Request, exc: UpstreamError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": exc.message, "error": exc.error},
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled server error: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

@app.get("/")
async def root():
    return {"message": "Ops Console API", "version": "1.0.0"}

@app.get("/health")
async def health():
    return {"status": "healthy", "service": "ops-console-api"}

def run():
    """Console entry point: validate configuration, then serve with uvicorn"""
    configure_logging()
    missing = settings.missing_credentials()
    if missing:
        logger.error(str(MissingConfigurationError(missing)))
        sys.exit(1)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())

if __name__ == "__main__":
    run()

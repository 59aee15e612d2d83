from fastapi import FastAPI, Request
from dotenv import load_dotenv
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response
import os
import logging
from pathlib import Path

ROOT_DIR = Path(__file__).parent
load_dotenv(ROOT_DIR / '.env')


# Security Headers Middleware
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        # Certificate previews are embedded in an iframe by the listing page
        if request.url.path.endswith("/preview") or request.url.path.endswith("/preview/latest"):
            response.headers["X-Frame-Options"] = "SAMEORIGIN"
        else:
            response.headers["X-Frame-Options"] = "DENY"

        if os.environ.get("ENVIRONMENT") == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

from database import db
from routes.auth import router as auth_router
from routes.vehicles import router as vehicles_router
from routes.public_vehicle import router as public_vehicle_router, page_router as public_page_router
from services.preview_service import listing_preview
from seed import seed_database

APP_VERSION = "1.0"

app = FastAPI(title="VCC Registry", version=APP_VERSION, redirect_slashes=False)

app.add_middleware(SecurityHeadersMiddleware)

app.include_router(auth_router)
app.include_router(vehicles_router)
app.include_router(public_vehicle_router)
app.include_router(public_page_router)

app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=os.environ.get('CORS_ORIGINS', '*').split(','),
    allow_methods=["*"],
    allow_headers=["*"],
)

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


@app.on_event("startup")
async def startup():
    result = await seed_database(db)
    logger.info(f"Seed: {result['message']}")


@app.on_event("shutdown")
async def shutdown():
    listing_preview.close()
    logger.info("Preview released")


@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "VCC Registry", "version": APP_VERSION}


@app.get("/api/health")
async def health():
    return {"status": "ok", "service": "VCC Registry", "version": APP_VERSION}

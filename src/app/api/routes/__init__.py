"""HTTP routes mounted under /api."""

from fastapi import APIRouter

from app.api.routes import auth, health, mail, profile

router = APIRouter(prefix="/api")

# Include routers
router.include_router(auth.router)
router.include_router(profile.router)
router.include_router(health.router)
router.include_router(mail.router)
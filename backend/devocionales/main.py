import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from devocionales.core.settings import settings, validate_settings
from devocionales.db.session import SessionLocal, engine
from devocionales.models import Base
from devocionales.routers.auth import router as auth_router
from devocionales.routers.barrios import router as barrios_router
from devocionales.routers.families import router as families_router
from devocionales.routers.goals import router as goals_router
from devocionales.routers.members import router as members_router
from devocionales.routers.nucleos import router as nucleos_router
from devocionales.routers.timeline import router as timeline_router
from devocionales.routers.users import router as users_router
from devocionales.routers.visits import router as visits_router
from devocionales.services.users import seed_initial_admin

app = FastAPI(title="Devocionales API", version="0.1.0")
logger = logging.getLogger("devocionales.startup")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = request.headers.get("x-request-id")
    logger.exception("Unhandled server error", extra={"request_id": request_id})
    payload = {"detail": "Internal server error"}
    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=500, content=payload)


@app.on_event("startup")
def startup():
    validate_settings(settings)
    Base.metadata.create_all(bind=engine)

    admin_email = str(settings.admin_email)
    admin_password = settings.admin_password.strip()
    db: Session = SessionLocal()
    try:
        created = seed_initial_admin(
            db, email=admin_email, password=admin_password, community_name=settings.community_name
        )
        if created:
            logger.info("Initial admin created for %s (must change password on first login).", admin_email)
        else:
            logger.info("Initial admin not created (users already exist).")
    finally:
        db.close()


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(barrios_router)
app.include_router(nucleos_router)
app.include_router(families_router)
app.include_router(members_router)
app.include_router(visits_router)
app.include_router(goals_router)
app.include_router(timeline_router)

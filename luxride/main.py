import logging

from fastapi import FastAPI

from luxride.api.v1.booking import router as booking_router
from luxride.api.v1.profile import router as profile_router
from luxride.api.v1.trips import router as trips_router
from luxride.core.config import settings


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("owner_id", "session_id", "step", "booking_id", "reason"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)

app = FastAPI(title=settings.APP_NAME, version="1.0.0")

app.include_router(booking_router, prefix="/api/v1", tags=["booking"])
app.include_router(trips_router, prefix="/api/v1", tags=["trips"])
app.include_router(profile_router, prefix="/api/v1", tags=["profile"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}

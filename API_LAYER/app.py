# app.py
from typing import Any, Dict

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from asyncio import Lock

from configurations.config import DATABASE_URL, DEBUG, PORT
from configurations.logging_config import get_logger
from core.clock import SystemClock
from services.dispatcher import Dispatcher
from storage.memory import InMemoryStorage

logger = get_logger("finance_chatbot_api")

# -----------------------------
# FastAPI App
# -----------------------------
app = FastAPI(title="Finance Chatbot API", version="1.0")

# -----------------------------
# Storage + Dispatcher (Lifecycle managed)
# -----------------------------
db = None
dispatcher: Dispatcher | None = None

DB_CONNECTED: bool = False
DB_ERROR: str | None = None

# -----------------------------
# Metrics
# -----------------------------
metrics_lock = Lock()
request_counters = {
    "text": 0,
    "report": 0,
    "confirmation": 0,
    "total": 0,
    "errors": 0,
}

# -----------------------------
# Pydantic Models
# -----------------------------
class UserRequest(BaseModel):
    text: str
    user_id: str

# -----------------------------
# Startup / Shutdown Events
# -----------------------------
@app.on_event("startup")
async def startup():
    global db, dispatcher, DB_CONNECTED, DB_ERROR

    storage = InMemoryStorage()

    if not DATABASE_URL:
        logger.warning("DATABASE_URL not set; using in-memory storage.")
        DB_CONNECTED = False
        DB_ERROR = "DATABASE_URL not set"
    else:
        try:
            from prisma import Prisma
            from storage.prisma_store import PrismaStorage

            db = Prisma()
            await db.connect()
            storage = PrismaStorage(db)
            DB_CONNECTED = True
            DB_ERROR = None
            logger.info("✅ Prisma DB connected")
        except Exception as e:
            DB_CONNECTED = False
            DB_ERROR = str(e)
            logger.exception("❌ Failed to connect Prisma DB; falling back to in-memory storage")
            if DEBUG:
                raise

    # Dispatcher is created ONLY after storage is ready
    dispatcher = Dispatcher(storage, clock=SystemClock())
    dispatcher.contexts.start_sweeper()


@app.on_event("shutdown")
async def shutdown():
    global DB_CONNECTED
    if dispatcher is not None:
        await dispatcher.contexts.stop_sweeper()
    if DB_CONNECTED:
        await db.disconnect()
        DB_CONNECTED = False
        logger.info("✅ Prisma DB disconnected")

# -----------------------------
# API Endpoints
# -----------------------------
@app.get("/")
async def root():
    return {"message": "Finance Chatbot API is running."}


@app.get("/health")
async def health() -> Dict[str, Any]:
    info = {
        "status": "ok",
        "db_connected": DB_CONNECTED,
        "active_contexts": len(dispatcher.contexts) if dispatcher else 0,
    }
    if DB_ERROR:
        info["db_error"] = DB_ERROR
    return info


@app.get("/metrics")
async def metrics() -> Dict[str, Any]:
    async with metrics_lock:
        return request_counters.copy()


@app.post("/process")
async def process_request(request: UserRequest):
    async with metrics_lock:
        request_counters["total"] += 1

    if dispatcher is None:
        async with metrics_lock:
            request_counters["errors"] += 1
        raise HTTPException(status_code=503, detail="Service is starting up")

    reply = await dispatcher.handle(request.user_id, request.text)

    async with metrics_lock:
        request_counters[reply.kind] += 1

    return reply.model_dump(mode="json")


# -----------------------------
# Entrypoint
# -----------------------------
import uvicorn

if __name__ == "__main__":
    uvicorn.run("API_LAYER.app:app", host="0.0.0.0", port=PORT, workers=1)

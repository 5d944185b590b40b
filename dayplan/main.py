import os
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from contextlib import asynccontextmanager
from dotenv import load_dotenv

# === Load ENV ===
load_dotenv()

# === Logging ===
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# === Validate required ENV ===
required_env = ["DATABASE_URL", "JWT_SECRET", "OPENAI_API_KEY", "BILLING_WEBHOOK_SECRET"]
missing = [var for var in required_env if not os.getenv(var)]
if missing:
    logger.warning(f"⚠️ Missing .env variables: {', '.join(missing)}")
else:
    logger.info("✅ All critical environment variables loaded.")

# === Config ===
from dayplan.core.config import load_config
from dayplan.core.errors import PlanServiceError
from dayplan.middleware.api_logger import APILoggerMiddleware
from dayplan.middleware.cors import CORS_HEADERS, PermissiveCORSMiddleware

# === Routers ===
from dayplan.api.v1 import plan, usage, billing

# === App lifecycle ===
@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        await load_config()
        logger.info("✅ Startup complete: config loaded.")
        yield
    except Exception as e:
        logger.exception("❌ Startup failed.")
        raise e
    finally:
        logger.info("🛑 Shutdown complete.")

# === Initialize App ===
app = FastAPI(
    title="Dayplan API",
    version="1.0.0",
    lifespan=lifespan
)

# === Exception Handlers ===
@app.exception_handler(PlanServiceError)
async def plan_service_exception_handler(request: Request, exc: PlanServiceError):
    if exc.status_code >= 500:
        logger.error(f"❌ {exc.code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"⚠️ Validation Error: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content={"error": "invalid_request", "detail": str(exc.errors())}
    )

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("❌ Unhandled error")
    return JSONResponse(
        status_code=500,
        content={"error": "server_error", "detail": str(exc)},
        headers=CORS_HEADERS,
    )

# === Middleware ===
app.add_middleware(APILoggerMiddleware)
app.add_middleware(PermissiveCORSMiddleware)

# === Health Check ===
@app.get("/ping")
async def ping():
    return {"status": "ok", "message": "Dayplan API is live"}

# === Mount API Routes ===
app.include_router(plan.router, prefix="/api", tags=["plan"])
app.include_router(usage.router, prefix="/api", tags=["usage"])
app.include_router(billing.router, prefix="/api", tags=["billing"])

# === Dev Hot Reload ===
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("dayplan.main:app", host="0.0.0.0", port=8000, reload=os.getenv("ENV") == "dev")

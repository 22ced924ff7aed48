import logging
import os
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request  # noqa: E402
from fastapi.exceptions import RequestValidationError  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from fastapi.staticfiles import StaticFiles  # noqa: E402
from starlette import status  # noqa: E402

from gev_api.common.config import APP_NAME, APP_VERSION, LOG_LEVEL, UPLOAD_DIR  # noqa: E402
from gev_api.common.database import init_db  # noqa: E402
from gev_api.common.exceptions import AppError  # noqa: E402
from gev_api.common.responses import app_error_response, error_response  # noqa: E402
from gev_api.common.utils import describe_validation_error  # noqa: E402

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    init_db()
    logger.info("%s %s started", APP_NAME, APP_VERSION)
    yield


app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.environ.get("CORS_ORIGINS", "*").split(","),
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_request: Request, exc: RequestValidationError):
    return error_response(describe_validation_error(exc), status.HTTP_400_BAD_REQUEST)


@app.exception_handler(AppError)
async def app_error_handler(_request: Request, exc: AppError):
    return app_error_response(exc)


from gev_api.auth.routers import router as auth_router  # noqa: E402
from gev_api.customers.routers import router as customers_router  # noqa: E402
from gev_api.products.routers import router as products_router  # noqa: E402
from gev_api.reports.routers import dashboard_router, router as reports_router  # noqa: E402
from gev_api.sales.routers import router as sales_router  # noqa: E402
from gev_api.system.routers import router as system_router  # noqa: E402

app.include_router(auth_router, prefix="/api", tags=["auth"])
app.include_router(dashboard_router, prefix="/api", tags=["dashboard"])
app.include_router(products_router, prefix="/api/produtos", tags=["produtos"])
app.include_router(customers_router, prefix="/api/clientes", tags=["clientes"])
app.include_router(sales_router, prefix="/api/vendas", tags=["vendas"])
app.include_router(reports_router, prefix="/api/relatorios", tags=["relatorios"])
app.include_router(system_router, prefix="/api", tags=["sistema"])

# Locally stored product images
os.makedirs(UPLOAD_DIR, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=UPLOAD_DIR), name="uploads")


@app.get("/")
def read_root():
    """Root endpoint for the API.
    Returns:
        A simple message indicating the API is running.
    """
    return {"message": APP_NAME}


if __name__ == "__main__":
    # Set port from environment variable or default to 3000
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", 3000)))

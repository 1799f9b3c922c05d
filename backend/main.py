from fastapi import FastAPI, Request
from dotenv import load_dotenv

load_dotenv()
from contextlib import asynccontextmanager
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from database import Base, engine
from datetime import datetime
from exceptions import NotFoundError, ValidationError
import os
import routers.access as access
import routers.audit_log as audit_log
import routers.chart_of_accounts as chart_of_accounts
import routers.contacts as contacts
import routers.invoices as invoices
import routers.order_items as order_items
import routers.orders as orders
import routers.payment_methods as payment_methods
import routers.payments as payments
import routers.products as products
import routers.purchase_orders as purchase_orders
import routers.sales_orders as sales_orders
import routers.tax_rates as tax_rates
import models  # noqa: F401  registers every table on Base.metadata
import logging
from fastapi.openapi.utils import get_openapi


LOG_DIR = os.getenv("LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True) # Create the log directory if it doesn't exist

# Create a unique log file name based on current date/time
current_time_str = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
LOG_FILE = os.path.join(LOG_DIR, f"app_{current_time_str}.log")

# Configure the root logger
logging.basicConfig(
    level=logging.INFO, # Set desired minimum log level (INFO, DEBUG, WARNING, ERROR, CRITICAL)
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    filename=LOG_FILE, # Log to a file
    filemode='a' # Append to the file if it exists
)

# Also add a StreamHandler to output logs to the console
console_handler = logging.StreamHandler()
console_handler.setLevel(logging.INFO)
console_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logging.getLogger().addHandler(console_handler) # Add to the root logger

logger = logging.getLogger(__name__)
logger.info("Application starting up...")
# --- End Logging Configuration ---


# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler_enabled = os.getenv("ENABLE_SCHEDULER", "false").lower() in ("1", "true", "yes")
    if scheduler_enabled:
        from scheduler import scheduler
        scheduler.start()
        logger.info("Overdue invoice scheduler started.")
    yield
    if scheduler_enabled:
        scheduler.shutdown(wait=False)


app = FastAPI(lifespan=lifespan)


allowed_origins_str = os.getenv(
    "CORS_ALLOWED_ORIGINS",
    "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"
)

# Split the string into a list, stripping any whitespace
allowed_origins = [origin.strip() for origin in allowed_origins_str.split(',')]

# Enable CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message})

@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    logger.info(f"Rejected {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(status_code=400, content={"detail": exc.message})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema
    openapi_schema = get_openapi(
        title="Invoicing & Accounting API",
        version="1.0.0",
        description="API for orders, invoices, payments and access control",
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
    }
    # Apply security globally to all endpoints
    openapi_schema["security"] = [{"BearerAuth": []}]
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi


app.include_router(access.router)
app.include_router(contacts.router)
app.include_router(products.router)
app.include_router(chart_of_accounts.router)
app.include_router(tax_rates.router)
app.include_router(payment_methods.router)
app.include_router(purchase_orders.router)
app.include_router(sales_orders.router)
app.include_router(orders.router)
app.include_router(order_items.router)
app.include_router(invoices.router)
app.include_router(payments.router)
app.include_router(audit_log.router)

@app.get("/")
async def test_route():
    return {"message": "Welcome to the Invoicing & Accounting API!"}


from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from parcel_billing.core.config import settings
from parcel_billing.routers import (
    clients,
    invoices,
    rate_tiers,
    rates,
    shipment_charges,
)

OPENAPI_TAGS = [
    {"name": "Rates", "description": "Quote shipment rates and COD fees."},
    {"name": "Rate Tiers", "description": "Configure volume and weight based rate tiers."},
    {"name": "Clients", "description": "Billing accounts and their pricing capabilities."},
    {"name": "Shipment Charges", "description": "Rate shipments as they are created."},
    {"name": "Invoices", "description": "Generate, adjust and settle client invoices."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Parcel pricing and billing API. "
        "Rates shipments by monthly volume or weight bracket, accumulates charges "
        "into client invoices, and keeps adjusted invoices consistent and auditable."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(rates.router, prefix="/v1/rates", tags=["Rates"])
app.include_router(rate_tiers.router, prefix="/v1/rate_tiers", tags=["Rate Tiers"])
app.include_router(clients.router, prefix="/v1/clients", tags=["Clients"])
app.include_router(
    shipment_charges.router,
    prefix="/v1/shipment_charges",
    tags=["Shipment Charges"],
)
app.include_router(invoices.router, prefix="/v1/invoices", tags=["Invoices"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }

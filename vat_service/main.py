import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vat_service.api.vat_routes import router as vat_router
from vat_service.core.config import settings
from vat_service.services.validation import VatValidationError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Domaine VAT Service", docs_url="/docs")


@app.exception_handler(VatValidationError)
async def vat_validation_error_handler(request: Request, exc: VatValidationError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": "Invalid VAT calculation data", "details": exc.violations},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
):
    details = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        details.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid VAT calculation data", "details": details},
    )


@app.get("/")
def root():
    return {"message": "VAT Service Running"}


app.include_router(vat_router)

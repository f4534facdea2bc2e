from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.core_settings import get_settings
from app.infrastructure.db import get_db
from app.infrastructure.catalog_repository import CatalogProvider, SqlCatalogProvider
from app.infrastructure.submitter import HttpTransactionSubmitter, TransactionSubmitter
from app.application.service import ReconciliationService
from app.application.schemas import CatalogRead, PurchaseRequest, ReconciliationRead, SaleRequest, TransactionRead
from app.domain.errors import ResolutionError, StaleSnapshotConflict, SubmissionBlockedError, SubmissionError
from app.domain.line_items import TransactionKind

router = APIRouter(tags=["stock"])

def get_catalog_provider(db: Session = Depends(get_db)) -> CatalogProvider:
    return SqlCatalogProvider(db)

def get_submitter() -> TransactionSubmitter:
    settings = get_settings()
    return HttpTransactionSubmitter(
        settings.SUBMITTER_URL,
        timeout=settings.SUBMITTER_TIMEOUT,
        retries=settings.SUBMITTER_RETRIES,
    )

def get_service(
    catalog_provider: CatalogProvider = Depends(get_catalog_provider),
    submitter: TransactionSubmitter = Depends(get_submitter),
) -> ReconciliationService:
    return ReconciliationService(catalog_provider, submitter)

def _preview(service: ReconciliationService, kind: TransactionKind, payload):
    try:
        summary = service.preview(kind, [item.to_domain() for item in payload.items])
    except ResolutionError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    return summary.to_dict()

def _submit(service: ReconciliationService, kind: TransactionKind, payload):
    try:
        return service.submit(kind, [item.to_domain() for item in payload.items])
    except ResolutionError as e:
        raise HTTPException(status_code=422, detail=e.to_dict())
    except SubmissionBlockedError as e:
        detail = {"message": str(e)}
        if e.summary is not None:
            detail["negative_parts"] = [record.to_dict() for record in e.summary.negative_parts()]
        raise HTTPException(status_code=409, detail=detail)
    except StaleSnapshotConflict as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "upstream": e.detail})
    except SubmissionError as e:
        raise HTTPException(status_code=502, detail={"message": str(e), "upstream": e.detail})

@router.get("/catalog", response_model=CatalogRead)
def get_catalog(service: ReconciliationService = Depends(get_service)):
    catalog = service.catalog()
    return {
        "parts": [asdict(part) for part in catalog.parts],
        "products": [asdict(product) for product in catalog.products],
    }

@router.post("/purchases/preview", response_model=ReconciliationRead)
def preview_purchase(payload: PurchaseRequest, service: ReconciliationService = Depends(get_service)):
    """Per-part before/change/after if this purchase were committed now."""
    return _preview(service, TransactionKind.PURCHASE, payload)

@router.post("/sales/preview", response_model=ReconciliationRead)
def preview_sale(payload: SaleRequest, service: ReconciliationService = Depends(get_service)):
    return _preview(service, TransactionKind.SALE, payload)

@router.post("/purchases", response_model=TransactionRead, status_code=201)
def create_purchase(payload: PurchaseRequest, service: ReconciliationService = Depends(get_service)):
    return _submit(service, TransactionKind.PURCHASE, payload)

@router.post("/sales", response_model=TransactionRead, status_code=201)
def create_sale(payload: SaleRequest, service: ReconciliationService = Depends(get_service)):
    return _submit(service, TransactionKind.SALE, payload)

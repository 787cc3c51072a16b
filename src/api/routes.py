from fastapi import APIRouter
from src.api.contracts.endpoints.contract import router as contract_router
from src.api.contracts.endpoints.installment import router as installment_router
from src.api.ledger.endpoints.ledger_entry import router as ledger_router
from src.api.commissions.endpoints.salesperson import router as salesperson_router
from src.api.commissions.endpoints.commission_request import router as commission_request_router
from src.api.notifications.endpoints.notification import router as notification_router

api_router = APIRouter()

# Include all domain routers
api_router.include_router(contract_router)
api_router.include_router(installment_router)
api_router.include_router(ledger_router)

# commissions
api_router.include_router(salesperson_router)
api_router.include_router(commission_request_router)

api_router.include_router(notification_router)

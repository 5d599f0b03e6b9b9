from fastapi import APIRouter
from pharmacy.api.v1.endpoints import (
    auth,
    health,
    medicines,
    prescriptions,
    purchase_orders,
    sales,
    users,
    vendors,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(medicines.router, prefix="/medicines", tags=["medicines"])
api_router.include_router(sales.router, prefix="/sales", tags=["sales"])
api_router.include_router(vendors.router, prefix="/vendors", tags=["vendors"])
api_router.include_router(purchase_orders.router, prefix="/purchase-orders", tags=["purchase orders"])
api_router.include_router(prescriptions.router, prefix="/prescriptions", tags=["prescriptions"])
api_router.include_router(health.router, tags=["health"])

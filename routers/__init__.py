# routers/__init__.py
from .auth import router as auth_router
from .dashboard import router as dashboard_router
from .exchange_rate import router as exchange_rate_router
from .invoices import router as invoices_router
from .leases import router as leases_router
from .maintenance import router as maintenance_router
from .notifications import router as notifications_router
from .payments import router as payments_router
from .properties import router as properties_router
from .property_requests import router as property_requests_router

all_routers = [
     auth_router,
     properties_router,
     property_requests_router,
     leases_router,
     invoices_router,
     payments_router,
     maintenance_router,
     notifications_router,
     exchange_rate_router,
     dashboard_router,
]

__all__ = ["all_routers"]

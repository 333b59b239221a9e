# ── Core utilities ────────────────────────────────────────────
from app.routes.core_router import router as core_router

# ── Accounts ──────────────────────────────────────────────────
from app.routes.auth_router import router as auth_router
from app.routes.user_router import router as user_router

# ── Drivers & fleet ───────────────────────────────────────────
from app.routes.driver_router import router as driver_router
from app.routes.brand_router import router as brand_router
from app.routes.vehicle_router import router as vehicle_router

# ── Trips & bookings ──────────────────────────────────────────
from app.routes.trip_router import router as trip_router
from app.routes.inscription_router import router as inscription_router

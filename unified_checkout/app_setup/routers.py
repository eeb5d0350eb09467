"""
Registre central des routers du backend sandbox.
- API: unified-checkout (capture context, charge, config)
- Health: health_router
"""
from fastapi import FastAPI
from unified_checkout.sandbox import views as sandbox_views
from unified_checkout.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    app.include_router(sandbox_views.router)
    app.include_router(health_router)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from unified_checkout.config import CORS_ORIGINS

"""
Middlewares transverses du backend sandbox.
- register_basic_middlewares: CORS (la page marchande appelle le backend depuis une autre origine).
- register_security_middleware: en-têtes de sécurité sur les réponses JSON.
"""
def register_basic_middlewares(app: FastAPI) -> None:
    """
    Ajoute CORSMiddleware pour les origines définies (dev/prod).
    - allow_credentials uniquement si les origines sont explicites ("*" interdit les credentials).
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials="*" not in CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

def register_security_middleware(app: FastAPI) -> None:
    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cache-Control", "no-store")
        return response

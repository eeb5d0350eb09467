"""
ASGI entrypoint: expose `app` (backend sandbox) pour les process managers.

- uvicorn/hypercorn importent `unified_checkout.asgi:app`.
- Toute la configuration (CORS, routers, handlers, lifespan) est centralisée dans
  unified_checkout.app_setup.factory, ce fichier ne fait qu'exposer l'instance.
"""

from unified_checkout.app_setup.factory import create_app

app = create_app()

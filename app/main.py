from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.logging import setup_logging
from app.services.store_service import init_db

from app.api.routes_auth import router as auth_router
from app.api.routes_chat import router as chat_router
from app.api.routes_documents import router as docs_router

def create_app():
    setup_logging()
    init_db()

    app = FastAPI(title=settings.APP_NAME)

    # Allow the browser frontend to call the API from localhost
    origins = [o.strip() for o in (settings.CORS_ORIGINS or "").split(",") if o.strip()]
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(auth_router)
    app.include_router(docs_router)
    app.include_router(chat_router)

    @app.get("/health")
    async def health():
        db_ok = True
        try:
            from app.services.store_service import list_documents
            list_documents(None, limit=1)
        except Exception:
            db_ok = False
        return {"ok": db_ok, "app": settings.APP_NAME, "env": settings.ENV, "deps": {"db": db_ok}}

    return app

app = create_app()

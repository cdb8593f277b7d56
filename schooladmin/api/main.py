from typing import Optional

from fastapi import Depends, FastAPI

from schooladmin import __version__
from schooladmin.api.deps import get_evaluator, get_request_user
from schooladmin.common.logger import get_logger, setup_logger
from schooladmin.core.access import AccessLevelStore, PermissionEvaluator
from schooladmin.core.config import Settings, get_settings

logger = get_logger("api")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application with its access level snapshot loaded."""
    settings = settings or get_settings()

    setup_logger(
        level=settings.log_level,
        log_dir=settings.log_dir,
        file_logging=settings.log_to_file,
    )

    if settings.access_levels_file:
        store = AccessLevelStore.from_yaml(settings.access_levels_file)
    else:
        store = AccessLevelStore()
    if settings.seed_predefined_levels:
        store.initialize_predefined(settings.system_user)

    app = FastAPI(
        title=settings.app_name,
        description="Module, page and action permissions for school administration",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.access_levels = store

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__, "access_levels": len(store)}

    @app.get("/api/access/me")
    def my_permissions(
        evaluator: PermissionEvaluator = Depends(get_evaluator),
        user=Depends(get_request_user),
    ):
        """Effective permissions of the current user, for client-side guards."""
        return {"modules": evaluator.get_effective_permissions(user).to_documents()}

    logger.info(f"{settings.app_name} ready with {len(store)} access levels")
    return app

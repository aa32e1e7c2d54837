"""Application entry point and composition root."""

import falcon
import falcon.asgi
import structlog

from rolegate import __version__
from rolegate.application.services.permission_resolution import PermissionResolutionService
from rolegate.application.use_cases.permission.grant_permission import GrantPermissionUseCase
from rolegate.application.use_cases.permission.revoke_permission import RevokePermissionUseCase
from rolegate.application.use_cases.permission.update_user_permissions import (
    UpdateUserPermissionsUseCase,
)
from rolegate.config import Settings, get_settings
from rolegate.domain.permission_registry import PermissionRegistry
from rolegate.infrastructure.auth.keycloak_provider import KeycloakProvider
from rolegate.infrastructure.cache import InMemoryPermissionCache, NullPermissionCache
from rolegate.infrastructure.permission.permission_checker import RoleGatePermissionChecker
from rolegate.infrastructure.persistence.postgres.connection import create_pool
from rolegate.infrastructure.persistence.postgres.unit_of_work import create_uow_factory
from rolegate.interfaces.api.middleware.auth import AuthMiddleware
from rolegate.interfaces.api.middleware.cors import CORSMiddleware
from rolegate.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
from rolegate.interfaces.api.resources.health import HealthResource
from rolegate.interfaces.api.resources.permissions import (
    PermissionCacheStatsResource,
    PermissionCatalogResource,
    PermissionResource,
    RolePermissionsResource,
)
from rolegate.interfaces.api.resources.user_permissions import (
    PermissionCheckResource,
    UserOverridesResource,
    UserPermissionResource,
    UserPermissionsResource,
)
from rolegate.logging import setup_logging

logger = structlog.get_logger(__name__)


def main() -> None:
    """CLI entry point."""
    print(f"RoleGate v{__version__}")


def create_permission_cache(settings: Settings):
    if not settings.permission_cache_enabled:
        return NullPermissionCache()
    return InMemoryPermissionCache(
        max_size=settings.permission_cache_max_size,
        default_ttl=float(settings.permission_cache_ttl_seconds),
    )


def add_routes(
    app: falcon.asgi.App,
    permission_service: PermissionResolutionService,
    permission_checker,
    pool=None,
) -> None:
    """Register every API route on app."""
    update_permissions = UpdateUserPermissionsUseCase(permission_service, permission_checker)
    grant_permission = GrantPermissionUseCase(permission_service, permission_checker)
    revoke_permission = RevokePermissionUseCase(permission_service, permission_checker)

    health_resource = HealthResource(pool)
    app.add_route("/v1/health", health_resource)
    app.add_route("/v1/health/ready", health_resource, suffix="ready")
    app.add_route(
        "/v1/permissions", PermissionCatalogResource(permission_service, permission_checker)
    )
    app.add_route(
        "/v1/permissions/cache/stats",
        PermissionCacheStatsResource(permission_service, permission_checker),
    )
    app.add_route(
        "/v1/permissions/{code}", PermissionResource(permission_service, permission_checker)
    )
    app.add_route(
        "/v1/roles/{role}/permissions",
        RolePermissionsResource(permission_service, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/permissions",
        UserPermissionsResource(permission_service, permission_checker, update_permissions),
    )
    app.add_route(
        "/v1/users/{user_id}/permissions/overrides",
        UserOverridesResource(permission_service, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/permissions/check",
        PermissionCheckResource(permission_service, permission_checker),
    )
    app.add_route(
        "/v1/users/{user_id}/permissions/{code}",
        UserPermissionResource(grant_permission, revoke_permission),
    )


async def log_exception(req, resp, ex, params):
    """Last-resort handler: log the failure and answer 500."""
    logger.exception("Unhandled error", method=req.method, path=req.path)
    resp.status = falcon.HTTP_500
    resp.media = {"error": "Internal server error"}


def create_rolegate_app(settings: Settings | None = None):
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    setup_logging(settings)

    pool = create_pool(settings.database_url)
    uow_factory = create_uow_factory(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
            user_id_claim=settings.keycloak_user_id_claim,
        )
        if settings.keycloak_client_secret
        else None
    )

    permission_service = PermissionResolutionService(
        unit_of_work_factory=uow_factory,
        registry=PermissionRegistry(),
        cache=create_permission_cache(settings),
    )
    permission_checker = RoleGatePermissionChecker(permission_service)

    cors_origins = [
        o.strip() for o in settings.cors_origins.split(",") if o.strip()
    ]
    app = falcon.asgi.App(
        middleware=[
            CORSMiddleware(cors_origins),
            PoolLifespanMiddleware(
                pool,
                on_startup=(
                    permission_service.seed_default_permissions
                    if settings.seed_permissions_on_startup
                    else None
                ),
            ),
            AuthMiddleware(keycloak),
        ],
    )
    app.add_error_handler(Exception, log_exception)
    add_routes(app, permission_service, permission_checker, pool)

    logger.info(
        "RoleGate app created",
        version=__version__,
        environment=settings.environment,
        cache_enabled=settings.permission_cache_enabled,
        keycloak=keycloak is not None,
    )
    return app


def run_server() -> None:
    """Run uvicorn server."""
    import uvicorn

    settings = get_settings()
    app = create_rolegate_app(settings)
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)

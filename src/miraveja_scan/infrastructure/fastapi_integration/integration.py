from typing import Awaitable, Callable, List, Type, TypeVar

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from miraveja_scan.domain import IContainer

T = TypeVar("T")


def create_fastapi_dependency(container: IContainer, dependency_type: Type[T]) -> Callable[[], T]:
    """Create a FastAPI Depends() callable that resolves from the DI container.

    The resolved instance lifetime follows the mapping registered by the scan
    (singleton, transient, or scoped to the root container).

    Args:
        container: The DI container to resolve dependencies from.
        dependency_type: The type to resolve when the dependency is called.

    Returns:
        A callable that FastAPI can use with Depends().

    Example:
        >>> scan(container, lambda s: s.from_modules("app.services").add_classes_assignable_to(IUserService))
        >>> get_user_service = create_fastapi_dependency(container, IUserService)
        >>>
        >>> @app.get("/users")
        >>> async def list_users(service: IUserService = Depends(get_user_service)):
        ...     return await service.get_all()
    """

    def dependency() -> T:
        return container.resolve(dependency_type)

    return dependency


def create_fastapi_collection_dependency(container: IContainer, dependency_type: Type[T]) -> Callable[[], List[T]]:
    """Create a FastAPI Depends() callable resolving every mapping of a type.

    Example:
        >>> get_handlers = create_fastapi_collection_dependency(container, IEventHandler)
        >>>
        >>> @app.post("/events")
        >>> async def publish(handlers: List[IEventHandler] = Depends(get_handlers)):
        ...     ...
    """

    def dependency() -> List[T]:
        return container.resolve_all(dependency_type)

    return dependency


def create_scoped_dependency(dependency_type: Type[T]) -> Callable[[Request], T]:
    """Create a FastAPI dependency that uses the request-scoped container.

    Requires the ScopedContainerMiddleware to be installed.

    Args:
        dependency_type: The type to resolve from the scoped container.

    Returns:
        A callable that resolves from the request-scoped container.

    Raises:
        RuntimeError: When the request carries no scoped container.
    """

    def scoped_dependency(request: Request) -> T:
        if not hasattr(request.state, "di_container"):
            raise RuntimeError(
                "Request does not have a scoped DI container. Did you forget to add ScopedContainerMiddleware?"
            )
        scoped_container: IContainer = request.state.di_container
        return scoped_container.resolve(dependency_type)

    return scoped_dependency


class ScopedContainerMiddleware(BaseHTTPMiddleware):
    """Middleware that creates a scoped DI container for each request.

    Scanned ``SCOPED`` mappings resolve to one instance per request. The scoped
    container is accessible via ``request.state.di_container``.

    Attributes:
        container: The root DI container to create scopes from.

    Example:
        >>> app = FastAPI()
        >>> app.add_middleware(ScopedContainerMiddleware, container=container)
    """

    def __init__(self, app: FastAPI, container: IContainer):
        super().__init__(app)
        self.container = container

    async def dispatch(self, request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        scoped_container = self.container.create_scope()
        request.state.di_container = scoped_container

        try:
            response = await call_next(request)
            return response
        finally:
            scoped_container.clear()



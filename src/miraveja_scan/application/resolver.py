import inspect
from typing import Any, List, Tuple, get_origin, get_type_hints

from miraveja_scan.domain import (
    CircularDependencyError,
    IContainer,
    IResolver,
    UnresolvableError,
)


def constructor_parameters(dependency_type: Any) -> List[Tuple[str, inspect.Parameter, Any]]:
    """List the injectable constructor parameters of a class or closed generic alias.

    ``self``, ``*args`` and ``**kwargs`` are skipped. The third item of each tuple
    is the resolved type hint, or ``inspect.Parameter.empty`` when there is none.

    Example:
        >>> class LoggingDecorator:
        ...     def __init__(self, inner: ITestService, logger: Logger):
        ...         ...
        >>> [name for name, _, _ in constructor_parameters(LoggingDecorator)]
        ['inner', 'logger']
    """
    target = get_origin(dependency_type) or dependency_type
    signature = inspect.signature(target.__init__)
    type_hints = get_type_hints(target.__init__)

    parameters = []
    for param_name, param in signature.parameters.items():
        if param_name == "self":
            continue
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        parameters.append((param_name, param, type_hints.get(param_name, inspect.Parameter.empty)))
    return parameters


class DependencyResolver(IResolver):
    """Resolves dependencies using constructor introspection and type hints.

    Closed generic aliases such as ``GenericService[int]`` are inspected through
    their origin class and instantiated through the alias itself, so the created
    instance keeps its ``__orig_class__``.
    """

    def resolve_dependencies(self, dependency_type: Any, container: IContainer) -> Any:
        """Resolve all constructor dependencies and create instance.

        Args:
            dependency_type: The class (or closed generic alias) to instantiate.
            container: The container to resolve dependencies from.

        Returns:
            Instance with all dependencies injected.

        Raises:
            UnresolvableError: If any dependency cannot be resolved or lacks type hint.
            CircularDependencyError: If a dependency cycle is found while resolving parameters.

        Example:
            >>> class UserService:
            ...     def __init__(self, db: DatabaseConnection, logger: Logger):
            ...         self.db = db
            ...         self.logger = logger
            >>>
            >>> resolver = DependencyResolver()
            >>> instance = resolver.resolve_dependencies(UserService, container)
        """
        target = get_origin(dependency_type) or dependency_type
        if not inspect.isclass(target):
            raise UnresolvableError(dependency_type, "Only classes can be auto-wired.")
        if inspect.isabstract(target):
            raise UnresolvableError(dependency_type, "Abstract types cannot be instantiated without a registration.")

        try:
            kwargs = {}
            for param_name, param, param_type in constructor_parameters(dependency_type):
                # Parameters with defaults keep their default values
                if param.default is not inspect.Parameter.empty:
                    continue

                if param_type is inspect.Parameter.empty:
                    raise UnresolvableError(
                        dependency_type,
                        f"Parameter '{param_name}' lacks type hint and has no default value.",
                    )

                try:
                    kwargs[param_name] = container.resolve(param_type)
                except CircularDependencyError:
                    raise
                except Exception as e:
                    raise UnresolvableError(
                        dependency_type,
                        f"Failed to resolve dependency for parameter '{param_name}': {e}",
                    ) from e

            return dependency_type(**kwargs)

        except (UnresolvableError, CircularDependencyError):
            raise
        except Exception as e:
            raise UnresolvableError(
                dependency_type,
                f"Failed to auto-wire constructor for {dependency_type}: {e}",
            ) from e

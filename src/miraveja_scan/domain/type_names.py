from typing import Any, get_args, get_origin


def type_name(tp: Any) -> str:
    """Short, human readable name of a class or parameterised alias.

    Example:
        >>> type_name(IGenericService[int])
        'IGenericService[int]'
    """
    origin = get_origin(tp)
    if origin is not None:
        args = ", ".join(type_name(arg) for arg in get_args(tp))
        return f"{type_name(origin)}[{args}]"
    return getattr(tp, "__name__", repr(tp))


def full_type_name(tp: Any) -> str:
    """Module qualified name of a class, falling back to :func:`type_name`."""
    module = getattr(tp, "__module__", None)
    qualname = getattr(tp, "__qualname__", None)
    if get_origin(tp) is None and module and qualname:
        return f"{module}.{qualname}"
    return type_name(tp)

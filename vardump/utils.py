"""
Vardump utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------


def class_name(
    obj: Any,
    fully_qualified: bool = False,
    fully_qualified_builtins: bool = False,
) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, returns the fully qualified name for user objects or classes.
        fully_qualified_builtins (bool): If true, returns the fully qualified name for builtin objects or classes.

    Returns:
        str: The class name.

    Examples:
        Basic usage with a builtin instance:
            >>> class_name(10)
            'int'

        Fully qualified name for a builtin (when enabled):
            >>> class_name(10, fully_qualified_builtins=True)
            'builtins.int'

        User-defined class: instance and class object:
            >>> class C: ...
            >>> class_name(C())
            'C'
            >>> class_name(C, fully_qualified=True)
            'vardump.utils.C'
    """
    # type() rather than isinstance(): proxies answer __class__ for their referent
    cls = obj if issubclass(type(obj), type) else type(obj)

    name = getattr(cls, "__name__", None) or "?"
    module = getattr(cls, "__module__", None)

    if not isinstance(module, str) or not module:
        return name

    if module == "builtins":
        return f"{module}.{name}" if fully_qualified_builtins else name

    return f"{module}.{name}" if fully_qualified else name


def type_name(obj: Any) -> str:
    """
    Return the type name shown in dump headers and `#type` suffixes.

    User types are module-qualified (``myapp.models.User``), builtins are not (``list``).
    Module names starting with an underscore are shown without it, so C-accelerated
    types read like their public home (``_weakref`` -> ``weakref``).
    """
    name = class_name(obj, fully_qualified=True)
    module, dot, rest = name.partition(".")
    if dot and module.startswith("_") and not module.startswith("__"):
        name = f"{module.lstrip('_')}.{rest}"
    return name

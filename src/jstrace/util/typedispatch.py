"""Type-based dispatch for AST walkers.

A ``TypeDispatcher`` subclass declares one handler per node class with
``@dispatch(NodeClass, ...)`` and a fallback with ``@defaultdispatch``.
Calling the dispatcher with a node selects the handler registered for the
node's class (or the nearest base class in its MRO) and caches the choice.

The location index builder and the rewriter are both written this way, so
adding a node class to the typed AST without a handler falls through to the
default, which raises ``TypeDispatchError``.
"""

__all__ = [
    "TypeDispatcher",
    "defaultdispatch",
    "dispatch",
    "TypeDispatchError",
    "TypeDispatchDeclarationError",
]

import inspect


class TypeDispatchError(Exception):
    """Raised when a dispatcher has no handler for a value's type."""
    pass


class TypeDispatchDeclarationError(Exception):
    """Raised at class creation when handlers are declared incorrectly."""
    pass


def flattenTypesInto(l, result):
    for child in l:
        if isinstance(child, (list, tuple)):
            flattenTypesInto(child, result)
        else:
            if not isinstance(child, type):
                raise TypeDispatchDeclarationError(
                    "Expected a type, got %r instead." % child
                )
            result.append(child)


def dispatch(*types):
    """Mark a method as the handler for ``types`` (nested tuples allowed)."""

    def dispatchF(f):
        def dispatchWrap(*args, **kargs):
            return f(*args, **kargs)

        dispatchWrap.__original__ = f
        dispatchWrap.__dispatch__ = []
        flattenTypesInto(types, dispatchWrap.__dispatch__)
        return dispatchWrap

    return dispatchF


def defaultdispatch(f):
    """Mark a method as the handler used when no type matches."""

    def defaultWrap(*args, **kargs):
        return f(*args, **kargs)

    defaultWrap.__original__ = f
    defaultWrap.__dispatch__ = (None,)
    return defaultWrap


def dispatch__call__(self, p, *args):
    t = type(p)
    table = self.__typeDispatchTable__

    func = table.get(t)

    if func is None:
        # Walk the MRO once per class, then cache.
        for supercls in t.mro():
            func = table.get(supercls)
            if func is not None:
                break

        if func is None:
            func = table.get(None)

        table[t] = func

    return func(self, p, *args)


def exceptionDefault(self, node, *args):
    raise TypeDispatchError("%r cannot handle %r\n%r" % (type(self), type(node), node))


def inlineAncestor(t, lut):
    if hasattr(t, "__typeDispatchTable__"):
        for k, v in t.__typeDispatchTable__.items():
            if k not in lut:
                lut[k] = v


class typedispatcher(type):
    """Metaclass collecting ``@dispatch`` handlers into a lookup table."""

    def __new__(self, name, bases, d):
        lut = {}
        restore = {}

        for k, v in d.items():
            if hasattr(v, "__dispatch__") and hasattr(v, "__original__"):
                for t in v.__dispatch__:
                    if t in lut:
                        raise TypeDispatchDeclarationError(
                            "%s has declared with multiple handlers for type %s"
                            % (name, t.__name__)
                        )
                    lut[t] = v.__original__
                restore[k] = v.__original__

        d.update(restore)

        for base in bases:
            for t in inspect.getmro(base):
                inlineAncestor(t, lut)

        if None not in lut:
            raise TypeDispatchDeclarationError("%s has no default dispatch" % (name,))

        d["__typeDispatchTable__"] = lut

        return type.__new__(self, name, bases, d)


class TypeDispatcher(object, metaclass=typedispatcher):
    """
    Base class for type-dispatched walkers.

    Example:
        >>> class Counter(TypeDispatcher):
        ...     @dispatch(js_ast.Return)
        ...     def visitReturn(self, node):
        ...         return 1
        ...     @defaultdispatch
        ...     def visitOther(self, node):
        ...         return 0
        >>> Counter()(returnNode)
        1
    """

    __dispatch__ = dispatch__call__
    __call__ = dispatch__call__
    exceptionDefault = defaultdispatch(exceptionDefault)

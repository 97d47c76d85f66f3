"""
deferred.py: values that only exist once the platform has scheduled a resource

Service addresses, generated names and secrets are threaded through the
composition graph as Deferred objects. Nothing in the composers dereferences
them; they are resolved in one pass when the plan is rendered.
"""
from typing import Any, Callable, Iterable, Optional


class Deferred:
    """
    Deferred: a lazily computed value.

    The compute function receives a resolver (normally the ResourcePlan the
    value was declared in) and returns the value, which may itself contain
    further Deferred objects.
    """

    def __init__(self, compute: Callable[[Any], Any], label: str = "deferred", secret: bool = False):
        self._compute = compute
        self.label = label
        self.secret = secret

    @classmethod
    def of(cls, value: Any, secret: bool = False) -> "Deferred":
        """Wrap an already known value"""
        if isinstance(value, Deferred):
            return value
        return cls(lambda _resolver: value, label=repr(value) if not secret else "secret", secret=secret)

    @classmethod
    def reference(cls, key: str, path: str) -> "Deferred":
        """
        Reference a field of a declared resource.
        :param key: Resource key, "<Kind>/<name>"
        :param path: Dotted path into the manifest, e.g. "spec.ports.0.port"
        """
        return cls(lambda resolver: resolver.lookup(key, path), label=f"{key}#{path}")

    @staticmethod
    def gather(values: Iterable[Any]) -> "Deferred":
        """Combine plain and deferred values into one deferred list"""
        items = list(values)
        return Deferred(
            lambda resolver: [resolve_value(v, resolver) for v in items],
            label="[" + ", ".join(_label(v) for v in items) + "]",
            secret=any(is_secret(v) for v in items),
        )

    @staticmethod
    def format(template: str, *args: Any) -> "Deferred":
        """str.format() over deferred arguments"""
        return Deferred(
            lambda resolver: template.format(*[resolve_value(a, resolver) for a in args]),
            label=template.format(*[_label(a) for a in args]),
            secret=any(is_secret(a) for a in args),
        )

    def apply(self, fn: Callable[[Any], Any], label: Optional[str] = None) -> "Deferred":
        """Derive a new deferred value by transforming this one once it is known"""
        return Deferred(
            lambda resolver: fn(self.resolve(resolver)),
            label=label or self.label,
            secret=self.secret,
        )

    def resolve(self, resolver: Any) -> Any:
        return resolve_value(self._compute(resolver), resolver)

    def __format__(self, spec):
        raise TypeError(
            f"Deferred value {self!r} cannot be formatted before it is resolved; "
            "use Deferred.format() or .apply()"
        )

    def __repr__(self):
        return "Deferred(<secret>)" if self.secret else f"Deferred({self.label})"

    __str__ = __repr__


def is_secret(value: Any) -> bool:
    return isinstance(value, Deferred) and value.secret


def _label(value: Any) -> str:
    if isinstance(value, Deferred):
        return "<secret>" if value.secret else value.label
    return str(value)


def resolve_value(value: Any, resolver: Any) -> Any:
    """Recursively replace every Deferred inside dicts, lists and tuples"""
    if isinstance(value, Deferred):
        return value.resolve(resolver)
    if isinstance(value, dict):
        return {k: resolve_value(v, resolver) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [resolve_value(v, resolver) for v in value]
    return value


def contains_deferred(value: Any) -> bool:
    if isinstance(value, Deferred):
        return True
    if isinstance(value, dict):
        return any(contains_deferred(v) for v in value.values())
    if isinstance(value, (list, tuple)):
        return any(contains_deferred(v) for v in value)
    return False

"""
descriptors.py: declarative resources and the plan that collects them

A ResourcePlan is the provider context handed to every client factory. It
only records what should exist; reconciling it against a live cluster is the
job of whatever applies the rendered manifests.
"""
import copy
import logging
from typing import Any, Dict, Iterable, Iterator, List, Optional

import yaml

from .deferred import Deferred, resolve_value
from .errors import DuplicateResource, UnresolvedReference

CLUSTER_SCOPED_KINDS = {"Namespace", "StorageClass", "VolumeSnapshotClass"}

logger = logging.getLogger("stakekit.plan")


class Descriptor:
    """
    Descriptor: one declared resource (a Kubernetes manifest that may still
    contain Deferred values).
    """

    def __init__(self, manifest: Dict[str, Any], depends_on: Iterable[str] = ()):
        self.manifest = manifest
        self.depends_on = tuple(depends_on)

    @property
    def kind(self) -> str:
        return self.manifest["kind"]

    @property
    def name(self) -> str:
        return self.manifest["metadata"]["name"]

    @property
    def key(self) -> str:
        return f"{self.kind}/{self.name}"

    def ref(self, path: str) -> Deferred:
        """Deferred reference to a field of this resource, e.g. ref("metadata.name")"""
        return Deferred.reference(self.key, path)

    def __repr__(self):
        return f"Descriptor({self.key})"


class ResourcePlan:
    """
    ResourcePlan: ordered, append-only set of descriptors for one namespace
    """

    def __init__(self, namespace: str):
        self.namespace = namespace
        self._resources: Dict[str, Descriptor] = {}
        self._resolving: List[str] = []

    def declare(self, manifest: Dict[str, Any], depends_on: Iterable[Descriptor] = ()) -> Descriptor:
        """
        Declare a resource
        :param manifest: Manifest dict; metadata.namespace is filled in for namespaced kinds
        :param depends_on: Descriptors that must be declared before this one
        :return: The new Descriptor
        """
        manifest = copy.deepcopy(manifest)
        if manifest["kind"] not in CLUSTER_SCOPED_KINDS:
            manifest["metadata"].setdefault("namespace", self.namespace)

        deps = [d.key for d in depends_on]
        for dep in deps:
            if dep not in self._resources:
                raise UnresolvedReference(f"{manifest['kind']}/{manifest['metadata']['name']} depends on undeclared {dep}")

        descriptor = Descriptor(manifest, deps)
        if descriptor.key in self._resources:
            raise DuplicateResource(f"{descriptor.key} is already declared")
        self._resources[descriptor.key] = descriptor
        logger.debug(f"Declared {descriptor.key}")
        return descriptor

    def get(self, key: str) -> Optional[Descriptor]:
        return self._resources.get(key)

    def keys(self) -> List[str]:
        return list(self._resources)

    def of_kind(self, kind: str) -> List[Descriptor]:
        return [d for d in self._resources.values() if d.kind == kind]

    def __contains__(self, key: str) -> bool:
        return key in self._resources

    def __iter__(self) -> Iterator[Descriptor]:
        return iter(self._resources.values())

    def __len__(self) -> int:
        return len(self._resources)

    def lookup(self, key: str, path: str) -> Any:
        """
        Resolve a dotted path inside a declared resource. List items are
        addressed by index ("spec.ports.0.port").
        """
        descriptor = self._resources.get(key)
        if descriptor is None:
            raise UnresolvedReference(f"No resource {key} in plan for namespace '{self.namespace}'")

        marker = f"{key}#{path}"
        if marker in self._resolving:
            raise UnresolvedReference(f"Circular reference while resolving {marker}")

        current: Any = descriptor.manifest
        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            elif isinstance(current, list) and part.isdigit() and int(part) < len(current):
                current = current[int(part)]
            else:
                raise UnresolvedReference(f"{key} has no field '{path}'")

        self._resolving.append(marker)
        try:
            return resolve_value(current, self)
        finally:
            self._resolving.pop()

    def render(self) -> List[Dict[str, Any]]:
        """Resolve every deferred value and return plain manifests in declaration order"""
        return [resolve_value(d.manifest, self) for d in self._resources.values()]

    def to_yaml(self) -> str:
        return yaml.safe_dump_all(self.render(), default_flow_style=False, sort_keys=False)

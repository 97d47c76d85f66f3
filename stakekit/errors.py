"""
errors.py: exceptions raised while composing a deployment
"""


class StakekitError(Exception):
    """Base class for every error stakekit raises on purpose"""


class ConfigurationError(StakekitError, ValueError):
    """
    ConfigurationError: the deployment document or a client override is unusable.
    Raised before any resource is declared.
    """


class UnknownClientKind(ConfigurationError):
    """A requested client identifier has no registry entry"""

    def __init__(self, layer: str, client_id: str, known=()):
        self.layer = layer
        self.client_id = client_id
        self.known = sorted(known)
        hint = f" (known: {', '.join(self.known)})" if self.known else ""
        super().__init__(f"Unknown {layer} client '{client_id}'{hint}")


class MissingRequiredField(ConfigurationError):
    """A required field (usually a secret) was not supplied"""

    def __init__(self, owner: str, field: str):
        self.owner = owner
        self.field = field
        super().__init__(f"'{owner}' requires '{field}' to be set")


class InvalidTopology(StakekitError):
    """
    InvalidTopology: the requested clients cannot be wired together,
    e.g. validators with no consensus client to connect to.
    """


class DuplicateResource(StakekitError):
    """Two descriptors were declared with the same kind and name"""


class UnresolvedReference(StakekitError):
    """A deferred value points at a resource or field that was never declared"""

"""Registry of the custom resource kinds infra-manager reads and writes."""

import logging

logger = logging.getLogger(__name__)


class CRDRegistry:
    """Stamps API coordinates onto CRD model classes."""

    @classmethod
    def register(cls, group, version, kind, plural=None, scope="Namespaced"):
        """Decorator to register CRD models.

        Args:
            group: API group (e.g., 'core.gardener.cloud')
            version: API version (e.g., 'v1beta1')
            kind: Kind name (e.g., 'Shoot')
            plural: Plural name (defaults to kind.lower() + 's')
            scope: 'Namespaced' or 'Cluster'
        """

        def decorator(model_class):
            model_class._crd_group = group
            model_class._crd_version = version
            model_class._crd_kind = kind
            model_class._crd_plural = plural or f"{kind.lower()}s"
            model_class._crd_scope = scope

            logger.debug(f"Registered CRD: {group}/{version}/{kind}")
            return model_class

        return decorator


def api_coordinates(model_class):
    """Return (group, version, plural) for a registered model class."""
    if not hasattr(model_class, "_crd_group"):
        raise ValueError(
            f"Model {model_class.__name__} not decorated with @CRDRegistry.register"
        )
    return model_class._crd_group, model_class._crd_version, model_class._crd_plural

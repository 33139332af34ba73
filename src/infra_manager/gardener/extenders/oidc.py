"""OIDC configuration of the shoot API server."""

from infra_manager.gardener.pipeline import Extender


def _is_set(oidc):
    return oidc is not None and bool(oidc.clientID) and bool(oidc.issuerURL)


class OidcExtender(Extender):
    """Uses the Runtime OIDC config, or the operator default when none is given."""

    def __init__(self, default_oidc):
        self.default_oidc = default_oidc

    def apply(self, runtime, shoot):
        runtime_oidc = runtime.spec.shoot.kubernetes.kubeAPIServer.oidcConfig
        if _is_set(runtime_oidc):
            source = runtime_oidc.model_dump(exclude_none=True)
        else:
            source = self.default_oidc.model_dump()

        oidc_config = {key: value for key, value in source.items() if value not in ("", [], None)}
        shoot.ensure_kube_apiserver().oidcConfig = oidc_config

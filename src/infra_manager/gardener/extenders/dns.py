"""Shoot DNS domain and primary DNS provider."""

from infra_manager.gardener.pipeline import Extender


class DNSExtender(Extender):
    def __init__(self, secret_name, domain_prefix, provider_type):
        self.secret_name = secret_name
        self.domain_prefix = domain_prefix
        self.provider_type = provider_type

    def apply(self, runtime, shoot):
        if not self.domain_prefix:
            raise ValueError("DNS domain prefix is not configured")

        domain = f"{runtime.spec.shoot.name}.{self.domain_prefix}"
        shoot.spec.dns = {
            "domain": domain,
            "providers": [
                {
                    "primary": True,
                    "secretName": self.secret_name,
                    "type": self.provider_type,
                    "domains": {"include": [domain]},
                }
            ],
        }

from __future__ import annotations

import os
from typing import Callable, Dict, Literal, Union

import orjson
from pydantic import BaseModel, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


class Env(BaseModel):
    # Poll loop
    PROBER_POLL_INTERVAL: StrictStr = "10s"
    PROBER_PEER_REQUEST_TIMEOUT: StrictStr = "2s"

    # Management protocol proxy
    JMX_PORT: StrictInt = 7199
    JOLOKIA_PORT: StrictInt = 8080
    JMX_PROXY_URL: StrictStr | None = None
    USERS_DIR: StrictStr = "./users"

    # HTTP surface
    SERVER_PORT: StrictInt = 8888
    MAINTENANCE_PORT: StrictInt = 8889

    # Regions
    LOCAL_REGIONS: StrictStr = "[]"
    ALL_REGIONS_INGRESS_DOMAINS: StrictStr | None = None
    EXTERNAL_REGIONS_INGRESS_DOMAINS: StrictStr = "[]"
    LOCAL_REGION_INGRESS_DOMAIN: StrictStr | None = None
    PROBER_SUBDOMAIN: StrictStr = "prober"

    # Orchestrator
    SEED_HOSTNAMES: StrictStr = ""
    DATABASE_ENDPOINT_LABELS: StrictStr = "app.kubernetes.io/component=database"
    POD_NAMESPACE: StrictStr = "default"
    MAINTENANCE_CONFIGMAP_NAME: StrictStr | None = None

    # Logging
    LOG_LEVEL: Literal["trace", "debug", "info", "warn", "error"] = "info"
    LOG_OUTPUT: Literal["stdout", "stderr"] = "stdout"
    LOGS_DIRECTORY: StrictStr = os.getcwd()

    @classmethod
    def types_map(cls) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "PROBER_POLL_INTERVAL": str,
            "PROBER_PEER_REQUEST_TIMEOUT": str,
            "JMX_PORT": int,
            "JOLOKIA_PORT": int,
            "JMX_PROXY_URL": str,
            "USERS_DIR": str,
            "SERVER_PORT": int,
            "MAINTENANCE_PORT": int,
            "LOCAL_REGIONS": str,
            "ALL_REGIONS_INGRESS_DOMAINS": str,
            "EXTERNAL_REGIONS_INGRESS_DOMAINS": str,
            "LOCAL_REGION_INGRESS_DOMAIN": str,
            "PROBER_SUBDOMAIN": str,
            "SEED_HOSTNAMES": str,
            "DATABASE_ENDPOINT_LABELS": str,
            "POD_NAMESPACE": str,
            "MAINTENANCE_CONFIGMAP_NAME": str,
            "LOG_LEVEL": str,
            "LOG_OUTPUT": str,
            "LOGS_DIRECTORY": str,
        }

    def get_proxy_url(self) -> str:
        if self.JMX_PROXY_URL:
            return self.JMX_PROXY_URL

        return f"http://localhost:{self.JOLOKIA_PORT}/jolokia"

    def get_local_regions(self) -> list[str]:
        """
        Names of the regions served by this cluster, in configured order.

        Accepts either a JSON list of names or a JSON list of
        ``{"name": ...}`` objects.
        """
        regions = orjson.loads(self.LOCAL_REGIONS)

        return [
            region["name"] if isinstance(region, dict) else str(region)
            for region in regions
        ]

    def get_all_regions_ingress_domains(self) -> list[str] | None:
        if not self.ALL_REGIONS_INGRESS_DOMAINS:
            return None

        return orjson.loads(self.ALL_REGIONS_INGRESS_DOMAINS)

    def get_external_regions_ingress_domains(self) -> list[str]:
        return orjson.loads(self.EXTERNAL_REGIONS_INGRESS_DOMAINS)

    def get_seed_hostnames(self) -> list[str]:
        return [
            hostname.strip().split(".", 1)[0]
            for hostname in self.SEED_HOSTNAMES.split(",")
            if hostname.strip()
        ]

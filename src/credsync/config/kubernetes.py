"""Kubernetes API server connection settings."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import env_flag, env_float, optional_env_var, require_env_vars

SERVICE_ACCOUNT_DIR: Final[Path] = Path("/var/run/secrets/kubernetes.io/serviceaccount")
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0


@dataclass(frozen=True, slots=True)
class KubernetesConfig:
    """Where and how to reach the API server holding the credential secrets."""

    api_url: str
    token: str | None = None
    ca_file: str | None = None
    verify_tls: bool = True
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @property
    def verify(self) -> bool | str:
        """Value for httpx's ``verify`` argument."""

        if not self.verify_tls:
            return False
        return self.ca_file or True


def _read_if_exists(path: Path) -> str | None:
    if not path.is_file():
        return None
    return path.read_text(encoding="utf-8").strip() or None


def get_kubernetes_config(*, service_account_dir: Path = SERVICE_ACCOUNT_DIR) -> KubernetesConfig:
    """Build the connection settings from ``CREDSYNC_KUBE_*`` or the in-cluster environment.

    An explicit ``CREDSYNC_KUBE_API_URL`` wins; otherwise the service host/port
    injected into every pod and the mounted service-account token are used.
    """

    api_url = optional_env_var("CREDSYNC_KUBE_API_URL")
    if api_url is None:
        values = require_env_vars(("KUBERNETES_SERVICE_HOST", "KUBERNETES_SERVICE_PORT"))
        host = values["KUBERNETES_SERVICE_HOST"]
        if ":" in host and not host.startswith("["):
            host = f"[{host}]"  # IPv6 literal
        api_url = f"https://{host}:{values['KUBERNETES_SERVICE_PORT']}"

    token = optional_env_var("CREDSYNC_KUBE_TOKEN") or _read_if_exists(
        service_account_dir / "token"
    )
    ca_file = optional_env_var("CREDSYNC_KUBE_CA_FILE")
    if ca_file is None and (service_account_dir / "ca.crt").is_file():
        ca_file = str(service_account_dir / "ca.crt")

    return KubernetesConfig(
        api_url=api_url.rstrip("/"),
        token=token,
        ca_file=ca_file,
        verify_tls=env_flag("CREDSYNC_KUBE_VERIFY_TLS", default=True),
        timeout_seconds=env_float("CREDSYNC_KUBE_TIMEOUT", default=DEFAULT_TIMEOUT_SECONDS),
    )

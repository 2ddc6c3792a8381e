"""
Process-wide settings read from the environment (and a local .env file)
"""

import os
from dataclasses import dataclass

import structlog
from dotenv import load_dotenv

load_dotenv()

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Settings:
    """Hashicorp Vault AppRole identifiers handed to the Ansible integration"""

    ansible_hashi_vault_role_id: str = ""
    ansible_hashi_vault_secret_id: str = ""


def load_settings() -> Settings:
    settings = Settings(
        ansible_hashi_vault_role_id=os.getenv("ansible_hashi_vault_role_id", ""),
        ansible_hashi_vault_secret_id=os.getenv("ansible_hashi_vault_secret_id", ""),
    )
    logger.debug(
        "settings_loaded",
        role_id_set=bool(settings.ansible_hashi_vault_role_id),
        secret_id_set=bool(settings.ansible_hashi_vault_secret_id),
    )
    return settings


envs = load_settings()

"""
Configuration management for exa-mcp
Environment-based configuration, read once per process
"""
import logging
import sys
from typing import List, Optional

from pydantic_settings import BaseSettings

from exa_mcp.tools.catalog import parse_enabled_tools
from exa_mcp.core_types import ActivationConfig

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Exa API
    exa_api_key: str = ""
    exa_base_url: str = "https://api.exa.ai"
    exa_timeout: float = 25.0

    # Tool selection
    enabled_tools: str = ""
    debug: bool = False

    # Markdown conversion backend: auto, cloudflare, local or none
    markdown_backend: str = "auto"
    cloudflare_account_id: Optional[str] = None
    cloudflare_api_token: Optional[str] = None
    conversion_timeout: float = 20.0

    # Tool defaults
    default_num_results: int = 8
    default_max_characters: int = 3000
    default_context_max_characters: int = 10000

    # MCP transport: stdio, sse or streamable-http
    mcp_transport: str = "stdio"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    def get_enabled_tools(self) -> List[str]:
        """Parse ENABLED_TOOLS into a list, dropping blank entries."""
        return parse_enabled_tools(self.enabled_tools) or []

    def build_activation_config(self) -> ActivationConfig:
        enabled = self.get_enabled_tools()
        return ActivationConfig(
            explicit_enabled_ids=tuple(enabled) if enabled else None,
            debug=self.debug,
        )

    def has_cloudflare_credentials(self) -> bool:
        return bool(self.cloudflare_account_id and self.cloudflare_api_token)


def configure_logging(debug: bool = False) -> None:
    """Send logs to stderr; stdout carries the stdio MCP transport."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


# Global settings instance
settings = Settings()

"""Runtime settings.

MarshalSettings is a pydantic-settings model; every field can be overridden
through ``SCHEMA_MARSHAL_*`` environment variables (tuples as JSON arrays).
"""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class MarshalSettings(BaseSettings):
    """Settings shared by the parser, the compiler and the normalizer."""

    model_config = SettingsConfigDict(env_prefix="SCHEMA_MARSHAL_", frozen=True)

    # Parser
    register_on_parse: bool = True

    # Compiler
    default_generator: str = "assigned"

    # Normalizer
    strict_entity_hints: bool = True
    binary_key_suffixes: tuple[str, ...] = ("bytes", "blob", "data", "base64")
    binary_key_markers: tuple[str, ...] = ("binary",)
    clob_key_markers: tuple[str, ...] = ("clob",)

    def is_binary_key(self, key: str) -> bool:
        """Whether a record key names binary content."""
        lowered = key.lower()
        return lowered.endswith(self.binary_key_suffixes) or any(
            marker in lowered for marker in self.binary_key_markers
        )

    def is_clob_key(self, key: str) -> bool:
        """Whether a record key names character large-object content."""
        lowered = key.lower()
        return any(marker in lowered for marker in self.clob_key_markers)

# sculpture_guide/core/config.py
# -*- coding: utf-8 -*-
"""
Sculpture Guide Relay — Configuration
-------------------------------------
Central configuration for the realtime relay, including:

- app metadata
- API host/port
- location of the sculpture dataset
- remote realtime backend (OpenAI or Azure OpenAI) and its credentials
- per-session realtime options (voice, transcription, turn detection)
- greeting + system instructions sent at the start of every session
- the enrichment priority order

Every field can be overridden by an environment variable with the same
name in upper case (e.g. SCULPTURE_DATA_PATH, OPENAI_API_KEY, BACKEND).
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

# This file is: <root>/sculpture_guide/core/config.py
PACKAGE_DIR: Path = Path(__file__).resolve().parents[1]   # .../sculpture_guide
ROOT_DIR: Path = PACKAGE_DIR.parent                       # project root


DEFAULT_GREETING = (
    "Hey there! I'm your friendly sculpture guide. "
    "Feel free to ask me anything about sculptures!"
)

DEFAULT_SYSTEM_INSTRUCTIONS: List[str] = [
    (
        "You are a friendly and enthusiastic sculpture guide named Art. Your tone "
        "is warm, engaging, and conversational - like a passionate friend sharing "
        "interesting stories about art. You love to make sculpture knowledge "
        "accessible and fun for everyone. Use casual language, occasional humor, "
        "and relatable examples when explaining complex concepts. When you receive "
        "questions about sculptures, use the database information provided to "
        "answer accurately, but present it in an engaging, conversational way. If "
        "specific information isn't available in the database, you may provide "
        "general knowledge, but clearly indicate this with phrases like 'Beyond our "
        "collection...' or 'Art historians generally believe...'"
    ),
    (
        "The database contains fascinating information about sculptures, including "
        "details about the artists, materials used, historical context, and where "
        "they are currently displayed. It also includes image URLs and detailed "
        "visual descriptions of each sculpture. For visually impaired users, "
        "emphasize these visual descriptions to help them form a mental image of "
        "the artwork. When discussing any sculpture, always include its visual "
        "aspects - describe colors, shapes, textures, expressions, poses, and other "
        "important visual elements in rich, evocative language. Share this "
        "information with enthusiasm and help users discover the amazing stories "
        "and visual beauty behind these works. Feel free to express appreciation "
        "for the craftsmanship and beauty of the sculptures you discuss. Respond as "
        "if you're giving a personal, immersive tour through a museum - "
        "knowledgeable but approachable and engaging, with special attention to "
        "helping visually impaired users experience the art through your "
        "descriptions."
    ),
]


# ---------------------------------------------------------------------------
# Settings model
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """
    Global configuration for the relay server.

    This class is instantiated once at import time as `settings`
    and used everywhere in the codebase.
    """

    model_config = SettingsConfigDict(
        env_file=ROOT_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- App / server basics -----------------------------------------------
    app_name: str = "Sculpture Guide Realtime Relay"
    environment: Literal["development", "production", "test"] = "development"
    debug: bool = True

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # --- Dataset ------------------------------------------------------------
    # Relative paths are resolved against the current working directory.
    sculpture_data_path: Path = Field(
        default=Path("data/sculptures.json"),
        description="JSON document with sculptures/artists/materials/periods/locations.",
    )
    preload_data: bool = True

    # --- Remote realtime backend -------------------------------------------
    backend: Literal["openai", "azure"] = "openai"

    # ENV: OPENAI_API_KEY=sk-...
    openai_api_key: str | None = Field(
        default=None,
        description="API key for the OpenAI realtime endpoint (env: OPENAI_API_KEY).",
    )
    openai_model: str = "gpt-4o-realtime-preview"
    openai_realtime_url: str = "wss://api.openai.com/v1/realtime"

    azure_openai_api_key: str | None = None
    azure_openai_endpoint: str | None = Field(
        default=None,
        description="e.g. https://my-resource.openai.azure.com (env: AZURE_OPENAI_ENDPOINT).",
    )
    azure_openai_deployment: str | None = None
    azure_openai_api_version: str = "2024-10-01-preview"

    realtime_connect_timeout_s: float = 10.0

    # --- Realtime session options ------------------------------------------
    realtime_voice: str = "verse"
    realtime_transcription_model: str = "whisper-1"
    realtime_turn_detection: str = "server_vad"
    realtime_input_audio_format: str = "pcm16"

    # --- Conversation -------------------------------------------------------
    greeting: str = DEFAULT_GREETING
    system_instructions: List[str] = Field(
        default_factory=lambda: list(DEFAULT_SYSTEM_INSTRUCTIONS)
    )

    # Category priority for enrichment (first category with hits wins).
    enrichment_order: List[Literal["sculpture", "artist", "material", "period"]] = [
        "sculpture",
        "artist",
        "material",
        "period",
    ]

    def resolved_data_path(self) -> Path:
        """Absolute path of the dataset file."""
        path = Path(self.sculpture_data_path)
        if not path.is_absolute():
            path = Path.cwd() / path
        return path.resolve()

    def session_options(self) -> dict:
        """Options passed to the remote session's configure() call."""
        return {
            "modalities": ["text", "audio"],
            "input_audio_format": self.realtime_input_audio_format,
            "input_audio_transcription": {"model": self.realtime_transcription_model},
            "voice": self.realtime_voice,
            "turn_detection": {"type": self.realtime_turn_detection},
        }


# Single global settings instance used by the rest of the app.
settings = Settings()

"""Backend and session configuration with environment variable loading.

Pydantic-based configuration for the Gemini backend and the session core.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are a helpful AI assistant that helps users understand and analyze "
    "the PDF document they have uploaded.\n"
    "When answering:\n"
    "1. Provide clear, concise answers grounded in the document.\n"
    "2. Cite the pages you rely on using the exact format [Page X], "
    "where X is the 1-indexed page number.\n"
    "3. If the document does not contain the answer, say so."
)

DEFAULT_SEED_PROMPT = "Summarize this document."


class BackendConfig(BaseModel):
    """Credentials for the Gemini API.

    Attributes:
        api_key: API key for Gemini access.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
        description="API key for the Gemini API",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError(
                "API key required. Set GEMINI_API_KEY or GOOGLE_API_KEY in .env"
            )
        return v.strip()


class PollPolicy(BaseModel):
    """Bounded retry policy for file status polling.

    Attributes:
        interval_s: Delay before the first status check.
        backoff: Multiplier applied to the delay after each check.
        max_interval_s: Ceiling for the delay between checks.
        max_attempts: Maximum number of status checks.
        timeout_s: Overall deadline for the poll loop.
    """

    interval_s: float = Field(default=5.0, ge=0.0)
    backoff: float = Field(default=1.0, ge=1.0)
    max_interval_s: float = Field(default=30.0, ge=0.0)
    max_attempts: int = Field(default=60, ge=1)
    timeout_s: float = Field(default=300.0, gt=0.0)

    def delays(self) -> list[float]:
        """Sleep durations preceding each status check."""
        delays: list[float] = []
        delay = self.interval_s
        for _ in range(self.max_attempts):
            delays.append(min(delay, self.max_interval_s))
            delay *= self.backoff
        return delays


class SessionConfig(BaseModel):
    """Tunables of the document chat session.

    Attributes:
        max_file_size_bytes: Upload size ceiling.
        poll_interval_ms: Delay between file status checks.
        poll_backoff: Growth factor for the poll delay.
        max_poll_interval_ms: Ceiling for the poll delay.
        max_poll_attempts: Status checks before giving up.
        upload_timeout_s: Overall deadline for file processing.
        completion_model: Model identifier used for completions.
        system_instruction: Fixed instruction sent with every completion.
        seed_prompt: Instruction sent along with a freshly uploaded file.
    """

    max_file_size_bytes: int = Field(
        default_factory=lambda: int(os.getenv("MAX_FILE_SIZE_MB", "10")) * 1024 * 1024,
        ge=1,
        le=50 * 1024 * 1024,
    )
    poll_interval_ms: int = Field(
        default_factory=lambda: int(os.getenv("POLL_INTERVAL_MS", "5000")),
        ge=0,
    )
    poll_backoff: float = Field(default=1.0, ge=1.0)
    max_poll_interval_ms: int = Field(default=30000, ge=0)
    max_poll_attempts: int = Field(
        default_factory=lambda: int(os.getenv("MAX_POLL_ATTEMPTS", "60")),
        ge=1,
    )
    upload_timeout_s: float = Field(default=300.0, gt=0.0)
    completion_model: str = Field(
        default_factory=lambda: os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        min_length=1,
    )
    system_instruction: str = Field(default=DEFAULT_SYSTEM_INSTRUCTION, min_length=1)
    seed_prompt: str = Field(default=DEFAULT_SEED_PROMPT, min_length=1)

    def poll_policy(self) -> PollPolicy:
        """Build the poll policy for the upload gateway."""
        return PollPolicy(
            interval_s=self.poll_interval_ms / 1000,
            backoff=self.poll_backoff,
            max_interval_s=max(self.max_poll_interval_ms, self.poll_interval_ms) / 1000,
            max_attempts=self.max_poll_attempts,
            timeout_s=self.upload_timeout_s,
        )


def get_backend_config() -> BackendConfig:
    """Create backend configuration from environment.

    Returns:
        Configured BackendConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return BackendConfig()


def get_session_config() -> SessionConfig:
    """Create session configuration from environment."""
    return SessionConfig()

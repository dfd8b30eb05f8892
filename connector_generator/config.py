"""Generator settings."""
import os
from dataclasses import dataclass

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class GeneratorSettings:
    """Settings shared by the network and generation stages."""

    timeout: int = 30
    verify_ssl: bool = False  # exploratory tooling: certificate checks are opt-in
    max_samples: int = 10
    user_agent: str = "connector-generator/1.0.0"
    output_dir: str = "./generated"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "GeneratorSettings":
        """Load settings from environment variables."""
        return cls(
            timeout=int(os.getenv("CONNECTOR_GEN_TIMEOUT", "30")),
            verify_ssl=os.getenv("CONNECTOR_GEN_VERIFY_SSL", "false").lower() in TRUE_VALUES,
            max_samples=int(os.getenv("CONNECTOR_GEN_MAX_SAMPLES", "10")),
            user_agent=os.getenv("CONNECTOR_GEN_USER_AGENT", "connector-generator/1.0.0"),
            output_dir=os.getenv("CONNECTOR_GEN_OUTPUT_DIR", "./generated"),
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
        )

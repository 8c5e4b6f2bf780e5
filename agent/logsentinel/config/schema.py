from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from .defaults import DEFAULT_RULES_PATH, DEFAULT_WATCH_PATH

class AgentConfig(BaseModel):
    name: str = "logsentinel"
    log_level: str = "INFO"
    log_file: Optional[str] = None

class WatchConfig(BaseModel):
    path: str = str(DEFAULT_WATCH_PATH)
    poll_interval: float = Field(default=1.0, gt=0)

class OllamaConfig(BaseModel):
    url: str = "http://localhost:11434"
    model: str = "llama3"

class AnalysisConfig(BaseModel):
    provider: Literal["rules", "ollama"] = "rules"
    # Seconds; None disables the limit
    timeout: Optional[float] = Field(default=30.0, gt=0)
    rules_path: str = str(DEFAULT_RULES_PATH)
    ollama: OllamaConfig = Field(default_factory=OllamaConfig)

class WebhookConfig(BaseModel):
    url: str
    max_retries: int = Field(default=3, ge=1)
    retry_delay: float = Field(default=1.0, ge=0)

class EmailConfig(BaseModel):
    host: str
    port: int = 587
    sender: str
    recipients: List[str]
    username: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True

class AlertsConfig(BaseModel):
    timeout: Optional[float] = Field(default=15.0, gt=0)
    console: bool = True
    webhook: Optional[WebhookConfig] = None
    email: Optional[EmailConfig] = None

class SentinelConfig(BaseModel):
    agent: AgentConfig = Field(default_factory=AgentConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    alerts: AlertsConfig = Field(default_factory=AlertsConfig)

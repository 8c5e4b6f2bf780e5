from pathlib import Path

DEFAULT_CONFIG_PATH = Path("/etc/logsentinel/config.yml")
DEFAULT_RULES_PATH = Path("/etc/logsentinel/rules")
DEFAULT_WATCH_PATH = Path("app_logs.txt")
CONFIG_ENV_VAR = "LOGSENTINEL_CONFIG"

DEFAULT_CONFIG = {
    "agent": {
        "name": "logsentinel",
        "log_level": "INFO",
        "log_file": None,
    },
    "watch": {
        "path": str(DEFAULT_WATCH_PATH),
        "poll_interval": 1.0,
    },
    "analysis": {
        "provider": "rules",  # rules | ollama
        "timeout": 30.0,
        "rules_path": str(DEFAULT_RULES_PATH),
        "ollama": {
            "url": "http://localhost:11434",
            "model": "llama3",
        },
    },
    "alerts": {
        "timeout": 15.0,
        "console": True,
        "webhook": None,  # {url, max_retries, retry_delay}
        "email": None,  # {host, port, sender, recipients, username, password, use_tls}
    },
}

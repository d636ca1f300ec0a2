import yaml
from pathlib import Path
import os
from typing import Any, Dict, Optional
import logging
import re

DEFAULT_CONFIG: Dict[str, Any] = {
    "database": {
        "url": "${ATHAN_DB_URL}",
    },
    "upstream": {
        "base_url": "http://api.aladhan.com/v1",
        "timeout": 30,
    },
    "prayer": {
        "default_method": 2,  # Muslim World League
    },
    "api": {
        "host": "127.0.0.1",
        "port": 8765,
    },
    "logging": {
        "level": "INFO",
        "file": "~/.athan_service/athan_service.log",
    },
}


class Config:
    def __init__(self, config_path: Optional[str] = None):
        logging.debug("Initializing Config class")

        if config_path:
            self.config_file = Path(config_path).resolve()
            self.config_dir = self.config_file.parent
        else:
            self.config_dir = Path.cwd()
            self.config_file = self.config_dir / "config.yaml"

        logging.debug(f"Using config file: {self.config_file}")

        # Load environment variables from .env file
        self._load_env_file()

        self._ensure_config_exists()
        self._load_config()

    def _ensure_config_exists(self) -> None:
        """Create default config if it doesn't exist"""
        if not self.config_dir.exists():
            logging.info(f"Creating config directory: {self.config_dir}")
            self.config_dir.mkdir(parents=True)

        if not self.config_file.exists():
            logging.info(f"Creating default config file: {self.config_file}")
            self.config_file.write_text(yaml.dump(DEFAULT_CONFIG))

    def _load_env_file(self) -> None:
        """Load environment variables from .env file"""
        env_files = [
            self.config_dir / ".env",
            self.config_dir.parent / ".env",
            Path.cwd() / ".env"
        ]

        env_file = None
        for path in env_files:
            if path.exists():
                env_file = path
                break

        if not env_file:
            logging.debug("No .env file found, skipping environment variable loading")
            return

        logging.info(f"Loading environment variables from: {env_file}")
        try:
            with open(env_file, 'r') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#'):
                        continue

                    # KEY=VALUE
                    match = re.match(r'^([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*)$', line)
                    if match:
                        key, value = match.groups()
                        value = value.strip('"').strip("'")
                        # Real environment wins over .env
                        if key not in os.environ:
                            os.environ[key] = value
                            logging.debug(f"Loaded env var: {key}")
        except OSError as e:
            logging.warning(f"Error loading .env file: {e}")

    def _substitute_env_vars(self, data: Any) -> Any:
        """Recursively substitute environment variables in config data.
        Unset variables resolve to None so optional settings fall back to defaults."""
        if isinstance(data, dict):
            return {key: self._substitute_env_vars(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [self._substitute_env_vars(item) for item in data]
        elif isinstance(data, str):
            # ${VAR_NAME} or $VAR_NAME
            if data.startswith('${') and data.endswith('}'):
                return os.environ.get(data[2:-1])
            elif data.startswith('$') and len(data) > 1:
                return os.environ.get(data[1:])
            return data
        else:
            return data

    def _load_config(self) -> None:
        """Load configuration from file"""
        try:
            logging.debug(f"Loading config from: {self.config_file}")
            with open(self.config_file) as f:
                new_data = yaml.safe_load(f)

            if not isinstance(new_data, dict):
                raise ValueError("Invalid config format: root must be a dictionary")

            self.data = self._substitute_env_vars(new_data)
            logging.debug(f"Loaded config data: {self.data}")

        except (OSError, ValueError, yaml.YAMLError) as e:
            logging.error(f"Error loading config: {e}")
            logging.info("Using default configuration")
            self.data = self._substitute_env_vars(DEFAULT_CONFIG)

        # Expand ~ in log file path
        log_file = (self.data.get("logging") or {}).get("file")
        if log_file:
            self.data["logging"]["file"] = os.path.expanduser(log_file)

    def get_section(self, name: str) -> Dict[str, Any]:
        """Return a top-level config section, falling back to the defaults for it"""
        section = self.data.get(name)
        if isinstance(section, dict):
            merged = self._substitute_env_vars(DEFAULT_CONFIG.get(name, {}))
            merged.update({k: v for k, v in section.items() if v is not None})
            return merged
        return self._substitute_env_vars(DEFAULT_CONFIG.get(name, {}))

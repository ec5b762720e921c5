"""
Configuration management for the athlete endpoint fuzzing framework
"""

import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

BASE_URL_ENV = "BASE_URL"


class ConfigurationError(Exception):
    """Raised when the configuration prevents any request from being attempted"""


@dataclass
class EndpointConfig:
    """Target endpoint configuration data class"""
    base_url: str = ""
    timeout_seconds: float = 30.0


@dataclass
class RunSettings:
    """Run settings data class"""
    log_file: str = "test-results.txt"
    output_dir: str = "results"
    parallel: bool = False
    workers: int = 0  # 0 means one per CPU
    save_json: bool = False


class Config:
    """Configuration manager"""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self._load_config()

    def _load_config(self):
        """Load configuration from file, then apply the environment"""
        config_data = self._get_default_config()
        if self.config_path:
            try:
                with open(self.config_path, 'r', encoding='utf-8') as f:
                    file_data = json.load(f)
            except FileNotFoundError:
                self._save_config(config_data)
            except json.JSONDecodeError as e:
                raise ConfigurationError(f"Invalid JSON in {self.config_path}: {e}") from e
            else:
                for section, values in file_data.items():
                    config_data.setdefault(section, {}).update(values)

        try:
            self.endpoint = EndpointConfig(**config_data.get('endpoint', {}))
            self.run = RunSettings(**config_data.get('run', {}))
        except TypeError as e:
            raise ConfigurationError(f"Unknown setting in {self.config_path}: {e}") from e

        env_url = os.environ.get(BASE_URL_ENV)
        if env_url is not None:
            self.endpoint.base_url = env_url

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration"""
        return {
            'endpoint': asdict(EndpointConfig()),
            'run': asdict(RunSettings()),
        }

    def _save_config(self, config_data: Dict[str, Any]):
        """Save configuration to file"""
        with open(self.config_path, 'w', encoding='utf-8') as f:
            json.dump(config_data, f, indent=2, ensure_ascii=False)

    def validate(self):
        """Raise ConfigurationError listing every issue found"""
        issues = ConfigValidator.validate_config(self)
        if issues:
            raise ConfigurationError("; ".join(issues))


class ConfigValidator:
    """Validate configuration values"""

    @staticmethod
    def validate_config(config: Config) -> List[str]:
        """Validate configuration and return list of issues"""
        issues = []

        # An empty URL is allowed: every request then fails and is reported.
        base_url = config.endpoint.base_url
        if base_url:
            try:
                parsed = urlparse(base_url)
                parsed.port  # raises on an out-of-range or non-numeric port
            except ValueError as e:
                issues.append(f"Malformed base URL {base_url!r}: {e}")
            else:
                if parsed.scheme not in ('http', 'https'):
                    issues.append(f"Invalid scheme in base URL: {base_url!r}")
                elif not parsed.hostname:
                    issues.append(f"Missing host in base URL: {base_url!r}")

        log_dir = os.path.dirname(config.run.log_file) or '.'
        if not os.path.isdir(log_dir):
            issues.append(f"Log file directory does not exist: {log_dir!r}")
        elif not os.access(log_dir, os.W_OK):
            issues.append(f"Log file directory is not writable: {log_dir!r}")

        output_dir = config.run.output_dir
        if os.path.exists(output_dir) and not os.path.isdir(output_dir):
            issues.append(f"Output path is not a directory: {output_dir!r}")

        timeout = config.endpoint.timeout_seconds
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            issues.append(f"Invalid timeout_seconds: {timeout!r}")

        workers = config.run.workers
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 0:
            issues.append(f"Invalid workers: {workers!r}")

        return issues

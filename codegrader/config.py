import logging
import os
from dataclasses import dataclass
from typing import Optional


logger = logging.getLogger(__name__)

LOG_FORMAT = '[%(asctime)s] %(levelname)s: %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning('Ignoring non-integer %s=%r, using %d', name, raw, default)
        return default


@dataclass
class Settings:
    judge_url: str = 'https://ce.judge0.com'
    max_retries: int = 40
    poll_interval_ms: int = 3000
    batch_size: int = 20
    fail_fast_count: int = 5
    http_timeout: int = 30
    problems_file: Optional[str] = None
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls) -> 'Settings':
        return cls(
            judge_url=os.getenv('JUDGE0_API_URL', cls.judge_url).rstrip('/'),
            max_retries=_env_int('JUDGE0_MAX_RETRIES', cls.max_retries),
            poll_interval_ms=_env_int('JUDGE0_POLL_INTERVAL', cls.poll_interval_ms),
            batch_size=_env_int('JUDGE0_BATCH_SIZE', cls.batch_size),
            fail_fast_count=_env_int('JUDGE0_FAIL_FAST_COUNT', cls.fail_fast_count),
            http_timeout=_env_int('JUDGE0_HTTP_TIMEOUT', cls.http_timeout),
            problems_file=os.getenv('PROBLEMS_FILE') or None,
            log_level=os.getenv('LOG_LEVEL', cls.log_level).upper(),
        )


def configure_logging(level: str = 'INFO') -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

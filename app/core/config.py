import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

_ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY') or os.getenv('CLAUDE_API_KEY')

_CLAUDE_MODEL = os.getenv('CLAUDE_MODEL', 'claude-3-7-sonnet-20250219')
_CLAUDE_MAX_TOKENS = int(os.getenv('CLAUDE_MAX_TOKENS', '1024'))

# "anthropic" or "echo"; defaults to echo when no key is configured
_REFLECTION_PROVIDER = os.getenv('REFLECTION_PROVIDER') or ('anthropic' if _ANTHROPIC_API_KEY else 'echo')
_REFLECTION_FALLBACK_TEXT = os.getenv('REFLECTION_FALLBACK_TEXT', 'No response from Claude')

_JOURNAL_API_URL = os.getenv('JOURNAL_API_URL', 'http://localhost:8000/api/journal')
_REFLECTION_TIMEOUT_SECONDS = float(os.getenv('REFLECTION_TIMEOUT_SECONDS', '30'))
_REFLECTION_MAX_ATTEMPTS = max(1, int(os.getenv('REFLECTION_MAX_ATTEMPTS', '1')))
_REFLECTION_RETRY_BACKOFF_SECONDS = float(os.getenv('REFLECTION_RETRY_BACKOFF_SECONDS', '0.5'))

_JOURNAL_STORAGE_PATH = Path(
    os.getenv('JOURNAL_STORAGE_PATH', str(Path.home() / '.reflection-journal' / 'storage.json'))
).expanduser()

_SERVICE_NAME = os.getenv('SERVICE_NAME', 'reflection-journal')


class Config:
    """Central configuration for the journal service and its client."""

    ANTHROPIC_API_KEY = _ANTHROPIC_API_KEY

    CLAUDE_MODEL = _CLAUDE_MODEL
    CLAUDE_MAX_TOKENS = _CLAUDE_MAX_TOKENS

    REFLECTION_PROVIDER = _REFLECTION_PROVIDER
    REFLECTION_FALLBACK_TEXT = _REFLECTION_FALLBACK_TEXT

    JOURNAL_API_URL = _JOURNAL_API_URL
    REFLECTION_TIMEOUT_SECONDS = _REFLECTION_TIMEOUT_SECONDS
    REFLECTION_MAX_ATTEMPTS = _REFLECTION_MAX_ATTEMPTS
    REFLECTION_RETRY_BACKOFF_SECONDS = _REFLECTION_RETRY_BACKOFF_SECONDS

    JOURNAL_STORAGE_PATH = _JOURNAL_STORAGE_PATH

    SERVICE_NAME = _SERVICE_NAME


settings = Config()

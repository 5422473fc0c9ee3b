"""
Shared constants for the journal service and client.

Storage keys match the keys the browser client used in localStorage so an
exported localStorage dump can be dropped into the storage file as is.
"""

# Local storage keys
ENTRIES_STORAGE_KEY = "journal-entries"
DARK_MODE_STORAGE_KEY = "dark-mode"

# Reflection providers understood by the backend
PROVIDER_ANTHROPIC = "anthropic"
PROVIDER_ECHO = "echo"
REFLECTION_PROVIDERS = {PROVIDER_ANTHROPIC, PROVIDER_ECHO}

ECHO_TEMPLATE = 'Here\'s a reflection on your entry: "{prompt}"'

# View modes offered by the CLI renderer
VIEW_MODES = ("list", "grid", "calendar")

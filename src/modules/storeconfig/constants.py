"""Store configuration defaults.

Returned whenever the configuration row has not been written yet, so
readers never observe an undefined configuration.
"""

SINGLETON_KEY = "app"

DEFAULT_SEASONAL_LABEL = "Seasonal"
DEFAULT_BLACKOUT_MESSAGE = ""

# used when an admin enables a blackout without writing a notice
FALLBACK_BLACKOUT_MESSAGE = "These dates are unavailable. Please choose another date."

SEASONAL_LABEL_MAX_LENGTH = 100

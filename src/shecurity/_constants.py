"""Internal constants shared across the library."""

DEFAULT_ALERT_URL = "http://localhost:5000/send-alert"
USER_AGENT = "shecurity/1"

# Mean Earth radius used for great-circle distances.
EARTH_RADIUS_KM = 6371.0

MS_PER_HOUR = 3_600_000

# Storage keys for the two contact credentials.
PHONE_KEY = "phone"
EMAIL_KEY = "email"

DEFAULT_CREDENTIAL_TTL_HOURS = 24.0
DEFAULT_NEAREST_COUNT = 3

# ------------------------------------------------------------------
# Voice activation
# ------------------------------------------------------------------

VOICE_KEYWORDS: frozenset[str] = frozenset({"help", "emergency", "police"})
DEFAULT_SPEECH_LANGUAGE = "en-US"

# ------------------------------------------------------------------
# User-visible notice texts
# ------------------------------------------------------------------

MISSING_CREDENTIALS_TEXT = "Please enter Emergency Number and Email"
FETCHING_LOCATION_TEXT = "Fetching location... press HELP again once it is available."
DISPATCH_IN_FLIGHT_TEXT = "An alert is already being sent."
LOCATION_UNSUPPORTED_TEXT = "Geolocation is not supported by your device."
SPEECH_UNSUPPORTED_TEXT = "Speech recognition is not supported by your device."

MAPS_BASE_URL = "https://www.google.com/maps"
VALID_TRAVEL_MODES: tuple[str, ...] = ("driving", "walking", "bicycling", "transit")

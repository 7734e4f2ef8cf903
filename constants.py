"""Application constants and configuration."""

# API configuration
API_BASE_URL = "https://pokeapi.co/api/v2"
API_POKEMON_URL = f"{API_BASE_URL}/pokemon"
CATALOG_PAGE_SIZE = 100  # API default is 20
FIRST_PAGE_URL = f"{API_POKEMON_URL}/?offset=0&limit={CATALOG_PAGE_SIZE}"
REQUEST_TIMEOUT = 10  # seconds

# User agent for API requests
USER_AGENT = "PokeIndex/1.0"

# Local storage
RECORDS_FILE = "pokemon_records.json"
SETTINGS_FILE = "poke_index_settings.json"

# Settings keys
CURRENT_PAGE_URL_KEY = "currentPageUrl"
HAVE_DOWNLOADED_ALL_PAGES_KEY = "haveDownloadedAllPages"

# Application settings
ITEMS_PER_PAGE = 25
MAX_CONCURRENT_LOADS = 6
SPRITE_SIZE = (64, 64)
DETAIL_SPRITE_SIZE = (128, 128)
STAT_MAX_VALUE = 255
STORE_REFRESH_DELAY = 100  # ms, debounces store notifications

# UI Configuration
DEFAULT_WINDOW_SIZE = "1000x860"
HEADER_HEIGHT = 80
CONTROL_FRAME_HEIGHT = 60
PAGINATION_FRAME_HEIGHT = 50
CARD_HEIGHT = 90

# Colors
COLORS = {
    "refresh": ("#DC2626", "#B91C1C"),
    "default": ("gray", "darkgray"),
    "card_default": ("gray23", "gray23"),
    "placeholder": (128, 128, 128),
    "secondary_text": ("gray40", "gray60"),
}

# Upper bounds of each statistic value band
STAT_COLOR_BANDS = [
    (30, "red"),
    (60, "orange"),
    (90, "yellow"),
    (120, "green"),
    (150, "cyan"),
    (180, "blue"),
]
STAT_COLOR_MAX = "purple"

TYPE_COLORS = {
    "normal": "gray",
    "fire": "orange",
    "water": "blue",
    "electric": "#E6B800",
    "grass": "green",
    "ice": "cyan",
    "fighting": "red",
    "poison": "purple",
    "ground": "brown",
    "flying": "#4B0082",
    "psychic": "pink",
    "bug": "#3EB489",
    "rock": "gray",
    "ghost": "#4B0082",
    "dragon": "blue",
    "dark": "orange",
    "steel": "cyan",
    "fairy": "pink",
}

"""
Configuration module for the AFV Range Map.
Defines radio range defaults, data source and web server settings.
"""

# Ground station range when no transceiver heights are published
ATC_DEFAULT_RANGE_KM = 50

# Floor for ground station rings (antennas close to the ground)
ATC_MIN_RANGE_KM = 10

# Data refresh interval in seconds
REFRESH_INTERVAL_SECONDS = 15

# Map data API endpoint
MAP_DATA_API_URL = 'https://afv-map-api.vercel.app/api/map-data'

# HTTP timeout for map data requests
REQUEST_TIMEOUT_SECONDS = 10

# Earth radius in kilometers (for great-circle and radio horizon calculations)
EARTH_RADIUS_KM = 6371

FEET_TO_METERS = 0.3048

# Initial map view
DEFAULT_VIEW_CENTER = (0.0, 0.0)
DEFAULT_VIEW_ZOOM = 2

# Selecting a client never leaves the view zoomed out further than this
MIN_SELECT_ZOOM = 3

# Web server
DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 5000

class InternalURIs:
    API = "/api"
    UPLOAD = API + "/upload"
    PROGRESS = API + "/progress"
    CATEGORIES = API + "/categories"
    ASSET_VIEW = API + "/assets/{assetId}/view"
    ASSET_STATS = API + "/assets/{assetId}/stats"


class CacheTimes:
    # seconds
    SHORT = 60
    MEDIUM = 300
    LONG = 600
    VERY_LONG = 3600
    DAY = 86400


FALLBACK_EXTENSION = "jpg"
PROGRESS_THRESHOLD = 5
PROGRESS_QUIET_PERIOD_SECONDS = 2.0
THUMBNAIL_COUNT = 5
THUMBNAIL_JPEG_QUALITY = 85

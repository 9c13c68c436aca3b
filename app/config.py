from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Server
    port: int = 8000
    debug: bool = False

    # Supabase
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_jwt_secret: str = ""

    # Google Gemini (recommendations, amenity/budget estimation)
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"

    # Google Places (hotels, restaurants, transit, parking)
    google_places_api_key: str = ""
    places_api_base: str = "https://maps.googleapis.com/maps/api/place"

    # OpenWeather
    openweather_api_key: str = ""
    weather_api_base: str = "https://api.openweathermap.org/data/2.5"

    # Comparison
    cache_ttl_hours: int = 24
    default_max_budget: float = 2000.0
    http_timeout_seconds: float = 10.0

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()

import os

TESTING = os.getenv("TESTING") == "1"
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
API_KEY = os.getenv("API_KEY", "dev-key")

# Sidekiq's default retry budget
DEFAULT_MAX_RETRY_COUNT = int(os.getenv("DEFAULT_MAX_RETRY_COUNT", "25"))

QUEUE_KEY_PREFIX = os.getenv("QUEUE_KEY_PREFIX", "queue:")
SCHEDULE_KEY = os.getenv("SCHEDULE_KEY", "schedule")
# malformed schedule entries are parked here instead of being promoted
DEAD_KEY = os.getenv("DEAD_KEY", "dead")

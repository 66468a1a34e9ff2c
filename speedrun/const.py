"""Constants for Ollama Speedrun."""

# Default configuration values
DEFAULT_OLLAMA_PORT = 11434
DEFAULT_CONNECT_TIMEOUT_MS = 500
DEFAULT_LOCALHOST_TIMEOUT_MS = 5000
DEFAULT_LOCALHOST_RETRIES = 3
DEFAULT_SUBNET_BATCH_SIZE = 50
DEFAULT_ENUM_TIMEOUT_MS = 10000
DEFAULT_GENERATE_TIMEOUT_S = 300
DEFAULT_SPEED_WEIGHT = 0.6
DEFAULT_QUALITY_WEIGHT = 0.4

# Logging configuration
DEFAULT_LOG_LEVEL = "INFO"

# Library log levels
LIBRARY_LOG_LEVELS = {
    "httpx": "WARNING",
    "httpcore": "WARNING",
    "asyncio": "WARNING",
}

# Network
LOCALHOST_IP = "127.0.0.1"
LOCALHOST_NAME = "localhost"
SUBNET_FIRST_HOST = 1
SUBNET_LAST_HOST = 254

# Ollama API paths
TAGS_PATH = "/api/tags"
SHOW_PATH = "/api/show"
GENERATE_PATH = "/api/generate"

# Request/Response field names
MODEL_FIELD = "model"
MODELS_FIELD = "models"
NAME_FIELD = "name"
SIZE_FIELD = "size"
DETAILS_FIELD = "details"
FAMILY_FIELD = "family"
PARAMETER_SIZE_FIELD = "parameter_size"
QUANTIZATION_LEVEL_FIELD = "quantization_level"
CAPABILITIES_FIELD = "capabilities"
PROMPT_FIELD = "prompt"
STREAM_FIELD = "stream"
RESPONSE_FIELD = "response"
DONE_FIELD = "done"
EVAL_COUNT_FIELD = "eval_count"
PROMPT_EVAL_COUNT_FIELD = "prompt_eval_count"

# Error body marker for models that disappeared after enumeration
MODEL_NOT_FOUND_MARKER = "not found"
MODEL_REMOVED_HINT = " (model removed or not pulled)"

# Units
BYTES_PER_KIB = 1024
BYTES_PER_MIB = 1024 ** 2
BYTES_PER_GIB = 1024 ** 3
MS_PER_SECOND = 1000.0

# File names
CONFIG_FILE_NAME = "config.json"

# App constants
APP_TITLE = "OLLAMA SPEEDRUN"
APP_DESCRIPTION = "Discover, benchmark, and choose your best local LLM"
APP_VERSION = "0.1.0"

# Exit codes
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

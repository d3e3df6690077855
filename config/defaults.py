"""Default configuration values."""

DEFAULT_PROVIDER = "Anthropic"
DEFAULT_MODEL = "claude-sonnet-4-20250514"

# Completion-token ceiling for a single model call
MAX_TOKENS = 32000

# Continuations allowed after a length-truncated segment
MAX_RESPONSE_SEGMENTS = 2

# Workspace root that prefixes every FileMap key
WORK_DIR = "/home/project"

# Stall recovery
STREAM_TIMEOUT_SECONDS = 45.0
STREAM_MAX_RETRIES = 2

# Messages kept verbatim once a chat summary replaces the older history
MESSAGE_SLICE_KEEP = 3

# Estimated prompt tokens below which context optimization is skipped (0 = never skip)
CONTEXT_OPTIMIZATION_THRESHOLD = 0

# Workspace files never offered to the context selector
IGNORE_PATTERNS = [
    "node_modules/**",
    ".git/**",
    "dist/**",
    "build/**",
    ".next/**",
    "coverage/**",
    ".cache/**",
    ".vscode/**",
    ".idea/**",
    "**/*.log",
    "**/.DS_Store",
    "**/npm-debug.log*",
    "**/yarn-debug.log*",
    "**/yarn-error.log*",
    "**/*lock.json",
    "**/*lock.yaml",
]

# Model provider configurations.
# kind selects the client implementation: anthropic, google or openai
# (any OpenAI-compatible endpoint).
DEFAULT_MODEL_PROVIDERS = {
    "Anthropic": {
        "kind": "anthropic",
        "base_url": "https://api.anthropic.com",
        "env_key": "ANTHROPIC_API_KEY",
        "api_key_link": "https://console.anthropic.com/settings/keys",
        "static_models": [
            {
                "name": "claude-sonnet-4-20250514",
                "label": "Claude Sonnet 4",
                "maxTokenAllowed": 200000,
                "maxCompletionTokens": 64000,
            },
            {
                "name": "claude-opus-4-1-20250805",
                "label": "Claude Opus 4.1",
                "maxTokenAllowed": 200000,
                "maxCompletionTokens": 32000,
            },
            {
                "name": "claude-3-5-haiku-20241022",
                "label": "Claude 3.5 Haiku",
                "maxTokenAllowed": 200000,
                "maxCompletionTokens": 8192,
            },
        ],
    },
    "OpenAI": {
        "kind": "openai",
        "base_url": "https://api.openai.com/v1",
        "env_key": "OPENAI_API_KEY",
        "api_key_link": "https://platform.openai.com/api-keys",
        "static_models": [
            {"name": "gpt-4o", "label": "GPT-4o", "maxTokenAllowed": 128000, "maxCompletionTokens": 16384},
            {"name": "gpt-4o-mini", "label": "GPT-4o Mini", "maxTokenAllowed": 128000, "maxCompletionTokens": 16384},
        ],
    },
    "Google": {
        "kind": "google",
        "base_url": "https://generativelanguage.googleapis.com",
        "env_key": "GOOGLE_GENERATIVE_AI_API_KEY",
        "api_key_link": "https://aistudio.google.com/app/apikey",
        "static_models": [
            {
                "name": "gemini-2.5-flash",
                "label": "Gemini 2.5 Flash",
                "maxTokenAllowed": 1000000,
                "maxCompletionTokens": 65536,
            },
        ],
    },
    "Groq": {
        "kind": "openai",
        "base_url": "https://api.groq.com/openai/v1",
        "env_key": "GROQ_API_KEY",
        "api_key_link": "https://console.groq.com/keys",
        "static_models": [
            {
                "name": "llama-3.3-70b-versatile",
                "label": "Llama 3.3 70B",
                "maxTokenAllowed": 128000,
                "maxCompletionTokens": 32768,
            },
        ],
    },
    "Deepseek": {
        "kind": "openai",
        "base_url": "https://api.deepseek.com/v1",
        "env_key": "DEEPSEEK_API_KEY",
        "api_key_link": "https://platform.deepseek.com/apiKeys",
        "static_models": [
            {"name": "deepseek-chat", "label": "Deepseek-Chat", "maxTokenAllowed": 64000, "maxCompletionTokens": 8192},
        ],
    },
    "OpenRouter": {
        "kind": "openai",
        "base_url": "https://openrouter.ai/api/v1",
        "env_key": "OPEN_ROUTER_API_KEY",
        "api_key_link": "https://openrouter.ai/settings/keys",
        "static_models": [
            {
                "name": "anthropic/claude-sonnet-4",
                "label": "Claude Sonnet 4 (OpenRouter)",
                "maxTokenAllowed": 200000,
                "maxCompletionTokens": 64000,
            },
        ],
    },
    "Ollama": {
        "kind": "openai",
        "base_url": "http://127.0.0.1:11434/v1",
        "env_key": None,  # No API key needed
        "static_models": [
            {"name": "llama3.2", "label": "Llama 3.2", "maxTokenAllowed": 8000},
        ],
    },
    "LMStudio": {
        "kind": "openai",
        "base_url": "http://127.0.0.1:1234/v1",
        "env_key": None,
        "static_models": [
            {"name": "local-model", "label": "Local Model", "maxTokenAllowed": 8000},
        ],
    },
}

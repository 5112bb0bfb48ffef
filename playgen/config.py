import os
from dotenv import load_dotenv
load_dotenv()


def get_env_int(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None: return default
    try:
        return int(value)
    except ValueError:
        return default


def get_env_float(key: str, default: float) -> float:
    value = os.getenv(key)
    if value is None: return default
    try:
        return float(value)
    except ValueError:
        return default


def get_env_bool(key: str, default: bool) -> bool:
    value = os.getenv(key)
    if value is None: return default
    return value.lower() in ('true', '1', 't', 'yes', 'y')


def get_env_ssl_verify(key: str, default):
    value = os.getenv(key)
    if value is None: return default
    if value.lower() in ('true', '1', 'yes'): return True
    if value.lower() in ('false', '0', 'no'): return False
    return value


class Config:
    # Project paths
    BASE_DIR = os.path.dirname(os.path.abspath(__file__))
    PROJECT_ROOT = os.path.dirname(BASE_DIR)
    TRACE_DIR = os.getenv("TRACE_DIR", os.path.join(PROJECT_ROOT, "logs"))

    SECRET_KEY = os.getenv("SECRET_KEY", "dev_secret_key")

    # --- LLM provider ---
    LLM_PROVIDER = os.getenv("LLM_PROVIDER", "openrouter")
    LLM_TEMPERATURE = get_env_float("LLM_TEMPERATURE", 0.7)
    LLM_MAX_TOKENS = get_env_int("LLM_MAX_TOKENS", 16000)

    # --- LLM API Keys ---
    OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")
    GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY")
    OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
    GROQ_API_KEY = os.getenv("GROQ_API_KEY")
    MISTRAL_API_KEY = os.getenv("MISTRAL_API_KEY")
    DEEPSEEK_API_KEY = os.getenv("DEEPSEEK_API_KEY")

    # --- LLM Models ---
    OPENROUTER_MODEL_NAME = os.getenv("OPENROUTER_MODEL_NAME", "google/gemini-3-flash-preview")
    GOOGLE_MODEL_NAME = os.getenv("GOOGLE_MODEL_NAME", "gemini-3-flash-preview")
    OPENAI_MODEL_NAME = os.getenv("OPENAI_MODEL_NAME", "gpt-4o-mini")
    GROQ_MODEL_NAME = os.getenv("GROQ_MODEL_NAME", "llama-3.3-70b-versatile")
    MISTRAL_MODEL_NAME = os.getenv("MISTRAL_MODEL_NAME", "mistral-large-latest")
    DEEPSEEK_MODEL_NAME = os.getenv("DEEPSEEK_MODEL_NAME", "deepseek-chat")

    # --- OLLAMA ---
    OLLAMA_BASE_URL = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434/v1")
    OLLAMA_MODEL_NAME = os.getenv("OLLAMA_MODEL_NAME", "llama3:8b")

    # --- Pipeline ---
    MAX_ITERATIONS = get_env_int("MAX_ITERATIONS", 3)  # 1 initial + 2 revisions
    CRITIC_MIN_DIMENSION = get_env_int("CRITIC_MIN_DIMENSION", 2)
    CRITIC_PASS_TOTAL = get_env_int("CRITIC_PASS_TOTAL", 10)

    # --- Sandbox ---
    MAX_COMPONENT_LINES = get_env_int("MAX_COMPONENT_LINES", 500)
    SANDBOX_TIMEOUT = get_env_int("SANDBOX_TIMEOUT", 10)

    # --- Reference retrieval (ChromaDB) ---
    REFERENCES_ENABLED = get_env_bool("REFERENCES_ENABLED", False)
    REFERENCE_RESULTS = get_env_int("REFERENCE_RESULTS", 3)

    LLM_EMBEDDING_PROVIDER = os.getenv("LLM_EMBEDDING_PROVIDER")
    LLM_EMBEDDING_SERVER_ADDRESS = os.getenv("LLM_EMBEDDING_SERVER_ADDRESS")
    LLM_EMBEDDING_SERVER_PORT = os.getenv("LLM_EMBEDDING_SERVER_PORT", "")
    LLM_EMBEDDING_MODEL_TYPE = os.getenv("LLM_EMBEDDING_MODEL_TYPE")
    LLM_EMBEDDING_CLIENT_TOKEN = os.getenv("LLM_EMBEDDING_CLIENT_TOKEN")

    CHROMA_TENANT = os.getenv("CHROMA_TENANT", "default_tenant")
    CHROMA_DATABASE = os.getenv("CHROMA_DATABASE", "default_database")
    CHROMA_COLLECTION_NAME = os.getenv("CHROMA_COLLECTION_NAME", "lesson_knowledge")

    CHROMA_CLIENT_TYPE = os.getenv("CHROMA_CLIENT_TYPE", "persistent")
    CHROMA_DB_DIR = os.path.join(PROJECT_ROOT, "chroma_db")
    CHROMA_TOKEN = os.getenv("CHROMA_TOKEN")

    CHROMA_HOST = os.getenv("CHROMA_HOST", "localhost")
    CHROMA_PORT = get_env_int("CHROMA_PORT", 8000)
    CHROMA_SSL = get_env_bool("CHROMA_SSL", False)
    CHROMA_SSL_VERIFY = get_env_ssl_verify("CHROMA_SSL_VERIFY", False)

    CHROMA_SERVER_AUTH_CREDENTIALS = os.getenv("CHROMA_SERVER_AUTH_CREDENTIALS", None)
    CHROMA_SERVER_AUTH_PROVIDER = os.getenv("CHROMA_SERVER_AUTH_PROVIDER", None)


config = Config()

from langchain_openai import ChatOpenAI
from langchain_google_genai import ChatGoogleGenerativeAI
from playgen.config import config

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


def get_langchain_model(provider: str = None, model_name: str = None, temperature: float = None):
    """
    Factory to get a LangChain ChatModel instance based on provider.
    Ensures the correct model name is used for each specific provider's API.
    """
    provider = (provider or config.LLM_PROVIDER).lower()
    temperature = config.LLM_TEMPERATURE if temperature is None else temperature
    max_tokens = config.LLM_MAX_TOKENS

    # --- Force correct model matching per provider ---
    if provider == "openrouter":
        model_name = model_name or config.OPENROUTER_MODEL_NAME
    elif provider == "openai":
        model_name = model_name or config.OPENAI_MODEL_NAME or "gpt-4o-mini"
    elif provider in ["google", "gemini"]:
        model_name = model_name or config.GOOGLE_MODEL_NAME
    elif provider == "groq":
        model_name = model_name or config.GROQ_MODEL_NAME
    elif provider == "mistral":
        model_name = model_name or config.MISTRAL_MODEL_NAME
    elif provider == "deepseek":
        model_name = model_name or config.DEEPSEEK_MODEL_NAME or "deepseek-chat"
    elif provider == "ollama":
        model_name = model_name or config.OLLAMA_MODEL_NAME or "llama3:8b"

    # --- 1. OpenRouter (OpenAI-compatible) ---
    if provider == "openrouter":
        return ChatOpenAI(
            model=model_name,
            api_key=config.OPENROUTER_API_KEY,
            base_url=OPENROUTER_BASE_URL,
            temperature=temperature,
            max_tokens=max_tokens
        )

    # --- 2. OpenAI (Native) ---
    elif provider == "openai":
        return ChatOpenAI(
            model=model_name,
            api_key=config.OPENAI_API_KEY,
            temperature=temperature,
            max_tokens=max_tokens
        )

    # --- 3. Google Gemini ---
    elif provider in ["google", "gemini"]:
        return ChatGoogleGenerativeAI(
            model=model_name,
            google_api_key=config.GOOGLE_API_KEY,
            temperature=temperature,
            max_tokens=max_tokens
        )

    # --- 4. Ollama (Local) ---
    elif provider == "ollama":
        base_url = config.OLLAMA_BASE_URL
        if base_url and base_url.endswith("/v1"):
            base_url = base_url[:-3]

        from langchain_ollama import ChatOllama
        return ChatOllama(
            model=model_name,
            base_url=base_url,
            temperature=temperature,
            num_predict=max_tokens
        )

    # --- 5. Groq ---
    elif provider == "groq":
        return ChatOpenAI(
            model=model_name,
            api_key=config.GROQ_API_KEY,
            base_url="https://api.groq.com/openai/v1",
            temperature=temperature,
            max_tokens=max_tokens
        )

    # --- 6. Mistral ---
    elif provider == "mistral":
        return ChatOpenAI(
            model=model_name,
            api_key=config.MISTRAL_API_KEY,
            base_url="https://api.mistral.ai/v1",
            temperature=temperature,
            max_tokens=max_tokens
        )

    # --- 7. DeepSeek ---
    elif provider == "deepseek":
        return ChatOpenAI(
            model=model_name,
            api_key=config.DEEPSEEK_API_KEY,
            base_url="https://api.deepseek.com",
            temperature=temperature,
            max_tokens=max_tokens
        )

    # --- Default Fallback ---
    print(f"[ModelFactory] Warning: Provider '{provider}' not explicitly supported. Falling back to OpenRouter.")
    return ChatOpenAI(
        model=config.OPENROUTER_MODEL_NAME,
        api_key=config.OPENROUTER_API_KEY,
        base_url=OPENROUTER_BASE_URL,
        temperature=temperature,
        max_tokens=max_tokens
    )

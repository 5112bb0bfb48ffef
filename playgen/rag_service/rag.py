import chromadb
import hashlib
import os
import re
import requests
import urllib3
from chromadb.api.types import Documents, Embeddings, EmbeddingFunction
from chromadb.config import Settings
from chromadb.utils import embedding_functions
from dataclasses import dataclass
from typing import Optional, List, Dict

from playgen.config import config

# Disable SSL certificate warnings for cleaner logs
urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


class RemoteOllamaAuthEF(EmbeddingFunction):
    """
    Embedding Function for a remote Ollama server behind an Authorization header.
    """

    def __init__(self, base_url: str, api_key: str, model_name: str = "nomic-embed-text", timeout: int = 30):
        base_url = base_url.rstrip("/")
        self.api_url = f"{base_url}/api/embeddings"
        self.model_name = model_name
        self.headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json"
        }
        self.timeout = timeout

    def __call__(self, input: Documents) -> Embeddings:
        embeddings = []
        for text in input:
            response = requests.post(
                self.api_url,
                json={"model": self.model_name, "prompt": text},
                headers=self.headers,
                timeout=self.timeout
            )
            response.raise_for_status()
            embeddings.append(response.json()["embedding"])
        return embeddings


@dataclass
class RagConfig:
    tenant: str = config.CHROMA_TENANT
    database: str = config.CHROMA_DATABASE
    collection_name: str = config.CHROMA_COLLECTION_NAME
    client_type: str = config.CHROMA_CLIENT_TYPE
    db_dir: str = config.CHROMA_DB_DIR
    host: str = config.CHROMA_HOST
    port: int = config.CHROMA_PORT
    ssl: bool = config.CHROMA_SSL
    ssl_verify: bool | str = config.CHROMA_SSL_VERIFY
    chroma_token: str = config.CHROMA_TOKEN
    chroma_server_auth_credentials: str = config.CHROMA_SERVER_AUTH_CREDENTIALS
    chroma_server_auth_provider: str = config.CHROMA_SERVER_AUTH_PROVIDER
    provider: str = config.LLM_EMBEDDING_PROVIDER or 'default'
    base_url: str = config.LLM_EMBEDDING_SERVER_ADDRESS
    base_port: str = config.LLM_EMBEDDING_SERVER_PORT
    model_type: str = config.LLM_EMBEDDING_MODEL_TYPE or 'all-MiniLM-L6-v2'
    embedding_token: str = config.LLM_EMBEDDING_CLIENT_TOKEN


def sanitize_collection_name(raw_name: Optional[str]) -> str:
    # ChromaDB requires [a-zA-Z0-9._-], alphanumeric at both ends, at least 3 chars
    if not raw_name or not raw_name.strip():
        print("[RAG] Collection name is empty/None. Defaulting to 'lesson_knowledge'.")
        raw_name = "lesson_knowledge"
    clean_name = re.sub(r'[^a-zA-Z0-9._-]', '', raw_name).strip("._-")
    if len(clean_name) < 3:
        clean_name += "_doc"
    return clean_name


class RagService:
    """Lesson knowledge store used to ground game design in reference material."""

    def __init__(self, rag_config: RagConfig = None, client=None):
        self.config = rag_config or RagConfig()

        self.embedding_function = self._get_embedding_function(
            self.config.provider,
            self.config.base_url,
            self.config.base_port,
            self.config.model_type,
            self.config.embedding_token
        )
        self.client = client or self._get_client(self.config)

        name = sanitize_collection_name(self.config.collection_name)
        print(f"[RAG] Using Collection: {name}")
        print(f"[RAG] Embedding Model: {self.config.model_type} ({self.config.provider})")

        self.collection = self.client.get_or_create_collection(
            name=name,
            embedding_function=self.embedding_function,
            metadata={"hnsw:space": "cosine"}
        )

    def _get_client(self, rag_config: RagConfig):
        mode = rag_config.client_type.lower()

        if mode == 'cloud':
            print("[RAG] Connecting to Chroma Cloud...")
            return chromadb.CloudClient(
                api_key=rag_config.chroma_token,
                tenant=rag_config.tenant,
                database=rag_config.database
            )

        elif mode == 'http':
            print(f"[RAG] Connecting to Chroma HTTP ({rag_config.host}:{rag_config.port})...")
            request_headers = {}
            chroma_settings = Settings()
            if rag_config.ssl:
                chroma_settings.chroma_server_ssl_verify = rag_config.ssl_verify

            if rag_config.chroma_server_auth_credentials:
                request_headers["X-Chroma-Token"] = rag_config.chroma_server_auth_credentials
                request_headers["Authorization"] = f"Bearer {rag_config.chroma_server_auth_credentials}"
                chroma_settings.chroma_client_auth_provider = (
                    rag_config.chroma_server_auth_provider or "chromadb.auth.token_auth.TokenAuthClientProvider"
                )
                chroma_settings.chroma_client_auth_credentials = rag_config.chroma_server_auth_credentials

            return chromadb.HttpClient(
                host=rag_config.host,
                port=rag_config.port,
                ssl=rag_config.ssl,
                headers=request_headers,
                settings=chroma_settings,
                tenant=rag_config.tenant,
                database=rag_config.database
            )

        elif mode == 'persistent':
            print(f"[RAG] Using Local Persistent Storage at: {rag_config.db_dir}")
            return chromadb.PersistentClient(path=rag_config.db_dir)

        elif mode == 'memory':
            return chromadb.EphemeralClient()

        else:
            raise ValueError(f"Unsupported Chroma client_type: {mode}")

    def _get_embedding_function(self, provider: str, base_url: str, base_port: str, model_type: str, token: str):
        provider = provider.lower()
        if provider == "ollama":
            full_url = f"{base_url}:{base_port}" if base_port else base_url
            return RemoteOllamaAuthEF(
                base_url=full_url,
                api_key=token or "dummy-key",
                model_name=model_type,
                timeout=120
            )
        elif provider == "openai":
            return embedding_functions.OpenAIEmbeddingFunction(
                api_key=token,
                model_name=model_type
            )
        else:
            return embedding_functions.DefaultEmbeddingFunction()

    def _hash_content(self, content: str) -> str:
        return hashlib.sha256(content.encode('utf-8')).hexdigest()

    def insert(self, content: str, metadata: dict = None) -> str:
        doc_id = self._hash_content(content)
        self.collection.upsert(
            documents=[content],
            metadatas=[metadata] if metadata else None,
            ids=[doc_id],
        )
        return doc_id

    def batch_insert(self, contents: List[str], metadatas: List[Dict] = None):
        if not contents: return
        ids = [self._hash_content(c) for c in contents]
        batch_size = 100
        for i in range(0, len(contents), batch_size):
            end = min(i + batch_size, len(contents))
            self.collection.upsert(
                documents=contents[i:end],
                metadatas=metadatas[i:end] if metadatas else None,
                ids=ids[i:end]
            )
        print(f"[RAG] Batch insert complete ({len(contents)} documents).")

    def query(self, query_text: str, n_results: int = 3) -> List[str]:
        results = self.collection.query(query_texts=[query_text], n_results=n_results)
        documents = results.get('documents') or [[]]
        return [doc for doc in documents[0] if doc]


_rag_instance: Optional[RagService] = None


def get_rag_service() -> RagService:
    global _rag_instance
    if _rag_instance is None:
        _rag_instance = RagService()
    return _rag_instance


def lookup_references(query_text: str, n_results: int = None) -> List[str]:
    """
    Reference snippets for the design prompt.
    Returns an empty list when retrieval is disabled or the store is unreachable.
    """
    if not config.REFERENCES_ENABLED or not query_text:
        return []
    try:
        return get_rag_service().query(query_text, n_results or config.REFERENCE_RESULTS)
    except Exception as e:
        print(f"[RAG] Reference lookup failed: {e}")
        return []


def ingest_directory(directory: str, service: RagService = None) -> int:
    """Load every .md/.txt file in ``directory`` as one document each."""
    service = service or get_rag_service()
    contents, metadatas = [], []
    for name in sorted(os.listdir(directory)):
        if not name.endswith((".md", ".txt")):
            continue
        with open(os.path.join(directory, name), "r", encoding="utf-8") as f:
            text = f.read().strip()
        if text:
            contents.append(text)
            metadatas.append({"source": name})
    service.batch_insert(contents, metadatas)
    return len(contents)


if __name__ == "__main__":
    import sys
    count = ingest_directory(sys.argv[1] if len(sys.argv) > 1 else ".")
    print(f"[RAG] Ingested {count} lesson documents.")

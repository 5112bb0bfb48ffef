from playgen.config import config
from playgen.rag_service import rag
from playgen.rag_service.rag import RagConfig, RagService, ingest_directory, lookup_references, sanitize_collection_name


class FakeCollection:
    def __init__(self):
        self.docs = {}

    def upsert(self, documents, ids, metadatas=None):
        self.docs.update(zip(ids, documents))

    def query(self, query_texts, n_results):
        return {"documents": [list(self.docs.values())[:n_results]]}


class FakeClient:
    def __init__(self):
        self.collection = FakeCollection()
        self.name = None

    def get_or_create_collection(self, name, embedding_function=None, metadata=None):
        self.name = name
        return self.collection


def make_service():
    return RagService(RagConfig(collection_name="lesson knowledge!", provider="default"), client=FakeClient())


def test_sanitize_collection_name():
    assert sanitize_collection_name("lesson knowledge!") == "lessonknowledge"
    assert sanitize_collection_name("ab") == "ab_doc"
    assert sanitize_collection_name(None) == "lesson_knowledge"


def test_insert_is_idempotent_per_content():
    service = make_service()
    first = service.insert("Tuples are immutable.")
    second = service.insert("Tuples are immutable.")
    assert first == second
    assert len(service.collection.docs) == 1
    assert service.client.name == "lessonknowledge"


def test_ingest_directory_reads_text_files(tmp_path):
    (tmp_path / "a.md").write_text("# Lists\nLists are mutable.", encoding="utf-8")
    (tmp_path / "b.txt").write_text("Strings are immutable.", encoding="utf-8")
    (tmp_path / "c.png").write_bytes(b"\x89PNG")
    (tmp_path / "empty.md").write_text("   ", encoding="utf-8")

    service = make_service()
    assert ingest_directory(str(tmp_path), service=service) == 2
    assert service.query("mutable", n_results=5) == ["# Lists\nLists are mutable.", "Strings are immutable."]


def test_lookup_disabled_returns_nothing(monkeypatch):
    monkeypatch.setattr(config, "REFERENCES_ENABLED", False)
    assert lookup_references("mutability") == []


def test_lookup_failure_returns_nothing(monkeypatch, capsys):
    def broken():
        raise ConnectionError("chroma is down")

    monkeypatch.setattr(config, "REFERENCES_ENABLED", True)
    monkeypatch.setattr(rag, "get_rag_service", broken)
    assert lookup_references("mutability") == []
    assert "Reference lookup failed" in capsys.readouterr().out


def test_lookup_uses_service(monkeypatch):
    service = make_service()
    service.insert("Tuples are immutable.")
    monkeypatch.setattr(config, "REFERENCES_ENABLED", True)
    monkeypatch.setattr(rag, "get_rag_service", lambda: service)
    assert lookup_references("tuples", n_results=1) == ["Tuples are immutable."]

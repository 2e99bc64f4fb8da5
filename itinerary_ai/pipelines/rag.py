"""Retrieval-augmented context for itinerary generation.

A trip request is turned into a short query, embedded, and matched against a
vector index of travel content (city guides, attractions, visa rules, past
itinerary summaries).  The best matches are rendered into a bounded text block
that the prompt builder places ahead of the trip details.  Retrieval is
best-effort: ``ContextRetriever.retrieve_context`` never raises and degrades to
an empty string so a generation run is never blocked by it.

``FaissVectorIndex`` is the built-in index implementation; any object that
satisfies ``VectorIndex`` can replace it.
"""
from __future__ import annotations

import hashlib
import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

import faiss
from langchain_community.docstore.in_memory import InMemoryDocstore
from langchain_community.vectorstores import FAISS
from langchain_core.embeddings import Embeddings
from langchain_openai import OpenAIEmbeddings
from langchain_text_splitters import RecursiveCharacterTextSplitter

from itinerary_ai.core.config import ApiSettings, RetrievalSettings
from itinerary_ai.core.errors import RetrievalError
from itinerary_ai.core.schemas import ContentType, RetrievedChunk, TripRequest

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "..."


class VectorIndex(Protocol):
    """Nearest-neighbour lookup over embedded travel content."""

    def __len__(self) -> int:
        ...

    async def query(
        self,
        vector: Sequence[float],
        top_k: int,
        content_types: Optional[Sequence[ContentType]] = None,
    ) -> List[RetrievedChunk]:
        ...


def build_embeddings(settings: RetrievalSettings, api_settings: ApiSettings) -> Embeddings:
    """Return an OpenAI embeddings client for the configured model."""

    return OpenAIEmbeddings(
        api_key=api_settings.ensure("openai_api_key"),
        model=settings.embedding_model,
        dimensions=settings.embedding_dimensions,
    )


def _content_hash(content: str) -> str:
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


class FaissVectorIndex:
    """In-process FAISS index holding travel chunks with their content type."""

    def __init__(self, embeddings: Embeddings, *, embedding_dimension: int = 1536) -> None:
        self._store = FAISS(
            embedding_function=embeddings,
            index=faiss.IndexFlatIP(embedding_dimension),
            docstore=InMemoryDocstore(),
            index_to_docstore_id={},
            normalize_L2=True,
        )

    def __len__(self) -> int:
        return len(self._store.index_to_docstore_id)

    async def add_chunks(self, chunks: Iterable[RetrievedChunk]) -> List[str]:
        """Index chunks whose content is not stored yet, keyed by SHA-256 of the content."""

        known = set(self._store.index_to_docstore_id.values())
        texts: List[str] = []
        metadatas: List[Dict[str, Any]] = []
        ids: List[str] = []
        for chunk in chunks:
            doc_id = _content_hash(chunk.content)
            if doc_id in known:
                continue
            known.add(doc_id)
            texts.append(chunk.content)
            metadatas.append({**chunk.metadata, "content_type": chunk.content_type.value})
            ids.append(doc_id)

        if not texts:
            return []
        return await self._store.aadd_texts(texts, metadatas=metadatas, ids=ids)

    async def query(
        self,
        vector: Sequence[float],
        top_k: int,
        content_types: Optional[Sequence[ContentType]] = None,
    ) -> List[RetrievedChunk]:
        search_kwargs: Dict[str, Any] = {"k": top_k}
        if content_types:
            allowed = {ContentType(value).value for value in content_types}
            search_kwargs["filter"] = lambda metadata: metadata.get("content_type") in allowed
            search_kwargs["fetch_k"] = max(top_k * 4, 20)

        docs = await self._store.asimilarity_search_by_vector(list(vector), **search_kwargs)
        chunks: List[RetrievedChunk] = []
        for doc in docs:
            metadata = dict(doc.metadata)
            content_type = metadata.pop("content_type")
            chunks.append(
                RetrievedChunk(
                    id=getattr(doc, "id", None) or _content_hash(doc.page_content),
                    content_type=ContentType(content_type),
                    content=doc.page_content,
                    metadata=metadata,
                )
            )
        return chunks


async def ingest_documents(
    index: FaissVectorIndex,
    texts: Iterable[str],
    content_type: ContentType,
    *,
    metadata: Optional[Dict[str, Any]] = None,
    chunk_size: int = 600,
    chunk_overlap: int = 100,
) -> List[str]:
    """Split long source texts into chunks and add them to ``index``."""

    splitter = RecursiveCharacterTextSplitter(chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    chunks = [
        RetrievedChunk(content_type=content_type, content=piece, metadata=dict(metadata or {}))
        for text in texts
        for piece in splitter.split_text(text)
        if piece.strip()
    ]
    return await index.add_chunks(chunks)


def render_context(chunks: Iterable[RetrievedChunk], max_chunk_length: int) -> str:
    """Render chunks as ``[content_type]`` labelled blocks separated by blank lines."""

    blocks: List[str] = []
    for chunk in chunks:
        content = chunk.content
        if len(content) > max_chunk_length:
            content = content[:max_chunk_length] + TRUNCATION_MARKER
        blocks.append(f"[{chunk.content_type.value}]\n{content}")
    return "\n\n".join(blocks)


class ContextRetriever:
    """Turns a trip request into a verified-context block for the prompt."""

    def __init__(
        self,
        embeddings: Embeddings,
        index: VectorIndex,
        settings: Optional[RetrievalSettings] = None,
    ) -> None:
        self._embeddings = embeddings
        self._index = index
        self._settings = settings or RetrievalSettings()

    @property
    def index(self) -> VectorIndex:
        return self._index

    @staticmethod
    def build_query_text(trip: TripRequest) -> str:
        """Destination, travel style and interests joined into one query."""

        return " ".join([trip.destination, trip.travel_style, *trip.interests]).strip()

    async def retrieve_chunks(
        self,
        trip: TripRequest,
        content_types: Optional[Sequence[ContentType]] = None,
    ) -> List[RetrievedChunk]:
        """Embed the trip query and return the nearest chunks.

        Raises:
            RetrievalError: If the embedding service or index lookup fails
        """

        query = self.build_query_text(trip)[: self._settings.max_query_length]
        try:
            vector = await self._embeddings.aembed_query(query)
        except Exception as exc:
            raise RetrievalError(f"Embedding request failed: {exc}") from exc
        if not vector:
            raise RetrievalError("No embedding returned")

        try:
            return await self._index.query(vector, self._settings.top_k, content_types)
        except Exception as exc:
            raise RetrievalError(f"Vector index lookup failed: {exc}") from exc

    async def retrieve_context(
        self,
        trip: TripRequest,
        content_types: Optional[Sequence[ContentType]] = None,
    ) -> str:
        """Return the rendered context block, or an empty string on any failure."""

        try:
            chunks = await self.retrieve_chunks(trip, content_types)
        except Exception as exc:
            logger.warning(f"Retrieval failed, continuing without context: {exc}")
            return ""

        if not chunks:
            logger.debug(f"Retrieval returned no chunks for {trip.destination}")
            return ""
        return render_context(chunks, self._settings.max_chunk_length)


def create_context_retriever(
    settings: RetrievalSettings,
    api_settings: ApiSettings,
    index: Optional[VectorIndex] = None,
) -> ContextRetriever:
    """Factory that assembles a retriever from settings, defaulting to a FAISS index."""

    embeddings = build_embeddings(settings, api_settings)
    if index is None:
        index = FaissVectorIndex(embeddings, embedding_dimension=settings.embedding_dimensions)
    return ContextRetriever(embeddings, index, settings)

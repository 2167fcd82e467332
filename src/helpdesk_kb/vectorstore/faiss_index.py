"""In-memory FAISS cosine index over stored question embeddings.

Vectors are L2-normalized on the way in, so the inner product returned by
`IndexFlatIP` is the cosine similarity (1 - cosine distance). The SQLite
question store is the source of truth; the index is rebuilt from it at
startup and whenever it falls behind the store.

Every mutation and every search runs on the event-loop thread. Adding one
question vector is cheap, so nothing is handed to a worker thread and a
search never observes a half-applied add.
"""

from __future__ import annotations

import asyncio

import faiss
import numpy as np

from helpdesk_kb.models.domain import StoredQuestion
from helpdesk_kb.observability.logger import get_logger
from helpdesk_kb.protocols.stores import QuestionStore

logger = get_logger("faiss_index")


class FAISSQuestionIndex:
    def __init__(self, dimensions: int) -> None:
        self._dimensions = dimensions
        self._index = faiss.IndexIDMap(faiss.IndexFlatIP(dimensions))
        self._int_to_question_id: dict[int, str] = {}
        self._question_id_to_int: dict[str, int] = {}
        self._next_id: int = 0
        # Store rows accounted for, indexed or skipped for a dimension mismatch
        self._synced_rows: int = 0
        self._write_lock = asyncio.Lock()

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def size(self) -> int:
        return self._index.ntotal

    @property
    def synced_rows(self) -> int:
        return self._synced_rows

    def add(self, question_ids: list[str], embeddings: np.ndarray) -> None:
        if len(question_ids) == 0:
            return
        embeddings = np.ascontiguousarray(embeddings, dtype=np.float32).reshape(
            len(question_ids), -1
        )
        if embeddings.shape[1] != self._dimensions:
            raise ValueError(
                f"Embedding has {embeddings.shape[1]} dimensions, index expects {self._dimensions}"
            )

        # A rebuild may already have picked these rows up from the store
        fresh = [i for i, qid in enumerate(question_ids) if qid not in self._question_id_to_int]
        if not fresh:
            return
        vectors = np.ascontiguousarray(embeddings[fresh])
        faiss.normalize_L2(vectors)
        int_ids = self._assign_int_ids([question_ids[i] for i in fresh])
        self._index.add_with_ids(vectors, np.array(int_ids, dtype=np.int64))
        self._synced_rows += len(fresh)
        logger.debug("faiss_added", count=len(fresh), total=self._index.ntotal)

    async def add_safe(self, question_ids: list[str], embeddings: np.ndarray) -> None:
        async with self._write_lock:
            self.add(question_ids, embeddings)

    def search(self, query_embedding: np.ndarray, top_k: int) -> list[tuple[str, float]]:
        """Return `(question_id, cosine_similarity)` pairs, most similar first."""
        if self._index.ntotal == 0 or top_k <= 0:
            return []
        query = np.ascontiguousarray(query_embedding, dtype=np.float32).reshape(1, -1)
        if query.shape[1] != self._dimensions:
            raise ValueError(
                f"Query has {query.shape[1]} dimensions, index expects {self._dimensions}"
            )
        faiss.normalize_L2(query)
        scores, indices = self._index.search(query, min(top_k, self._index.ntotal))
        results = []
        for idx, score in zip(indices[0], scores[0]):
            idx = int(idx)
            if idx == -1:
                continue
            question_id = self._int_to_question_id.get(idx)
            if question_id:
                results.append((question_id, float(score)))
        return results

    def rebuild(self, questions: list[StoredQuestion]) -> None:
        self._index.reset()
        self._int_to_question_id.clear()
        self._question_id_to_int.clear()
        self._next_id = 0
        self._synced_rows = 0
        usable = [q for q in questions if len(q.embedding) == self._dimensions]
        if len(usable) != len(questions):
            logger.warning(
                "faiss_rebuild_skipped_rows",
                skipped=len(questions) - len(usable),
                dimensions=self._dimensions,
            )
        if usable:
            self.add([q.id for q in usable], np.array([q.embedding for q in usable]))
        self._synced_rows = len(questions)
        logger.info("faiss_rebuilt", size=self._index.ntotal)

    async def catch_up(self, question_store: QuestionStore) -> bool:
        """Rebuild from `question_store` if it holds rows this index has not seen.

        The store is read under the write lock, so an `add_safe` racing the
        rebuild lands either in the snapshot or after it, never in between.
        """
        async with self._write_lock:
            stored = await question_store.count_questions()
            if stored == self._synced_rows:
                return False
            logger.info("index_behind_store", stored=stored, synced=self._synced_rows)
            self.rebuild(await question_store.get_all_questions())
            return True

    def _assign_int_ids(self, question_ids: list[str]) -> list[int]:
        int_ids = []
        for qid in question_ids:
            self._int_to_question_id[self._next_id] = qid
            self._question_id_to_int[qid] = self._next_id
            int_ids.append(self._next_id)
            self._next_id += 1
        return int_ids

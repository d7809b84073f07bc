from __future__ import annotations
import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Type

from fastapi import Request
from sqlalchemy import select
from sqlalchemy.orm import Session

from .db import Base, make_engine, make_session_factory
from .models import Lesson, SpeakingPracticeSession, VocabularyLearningSession

logger = logging.getLogger(__name__)


class RecordNotFound(LookupError):
	def __init__(self, kind: str, record_id: int) -> None:
		super().__init__(f"{kind} {record_id} not found")
		self.kind = kind
		self.record_id = record_id


class SessionStore:
	"""Persistence for lessons and generated learning sessions.

	One store is opened at application startup and handed to route handlers
	through ``get_store``. Each public method runs in its own short-lived
	SQLAlchemy session and returns plain dicts, so callers never hold ORM
	objects past a commit.
	"""

	def __init__(self, database_url: str) -> None:
		self.database_url = database_url
		self.engine = make_engine(database_url)
		self._session_factory = make_session_factory(self.engine)

	def create_all(self) -> None:
		Base.metadata.create_all(bind=self.engine)

	def close(self) -> None:
		self.engine.dispose()

	@contextmanager
	def session(self) -> Iterator[Session]:
		db = self._session_factory()
		try:
			yield db
			db.commit()
		except Exception:
			db.rollback()
			raise
		finally:
			db.close()

	def _list(self, model: Type[Any]) -> List[Dict[str, Any]]:
		with self.session() as db:
			rows = db.execute(select(model).order_by(model.created_at.desc(), model.id.desc())).scalars().all()
			return [row.to_dict() for row in rows]

	def _delete(self, model: Type[Any], record_id: int) -> bool:
		with self.session() as db:
			row = db.get(model, record_id)
			if row is None:
				return False
			db.delete(row)
		logger.info("Deleted %s id=%s", model.__tablename__, record_id)
		return True

	# ---- lessons ----

	def list_lessons(self) -> List[Dict[str, Any]]:
		return self._list(Lesson)

	def add_lesson(self, name: str, content: str) -> Dict[str, Any]:
		with self.session() as db:
			row = Lesson(name=name, content=content)
			db.add(row)
			db.flush()
			return row.to_dict()

	def replace_lesson(self, lesson_id: int, name: str, content: str) -> Dict[str, Any]:
		with self.session() as db:
			row = db.get(Lesson, lesson_id)
			if row is None:
				raise RecordNotFound("lesson", lesson_id)
			row.name = name
			row.content = content
			db.flush()
			return row.to_dict()

	# ---- vocabulary learning ----

	def list_vocabulary_sessions(self) -> List[Dict[str, Any]]:
		return self._list(VocabularyLearningSession)

	def add_vocabulary_session(self, input_words: str, results: Any) -> Dict[str, Any]:
		with self.session() as db:
			row = VocabularyLearningSession(input_words=input_words, results_json=json.dumps(results, ensure_ascii=False))
			db.add(row)
			db.flush()
			return row.to_dict()

	def delete_vocabulary_session(self, session_id: int) -> bool:
		return self._delete(VocabularyLearningSession, session_id)

	# ---- speaking practice ----

	def list_speaking_sessions(self) -> List[Dict[str, Any]]:
		return self._list(SpeakingPracticeSession)

	def add_speaking_session(self, conversation_name: str, topic: str, results: Any) -> Dict[str, Any]:
		with self.session() as db:
			row = SpeakingPracticeSession(
				conversation_name=conversation_name,
				topic=topic,
				results_json=json.dumps(results, ensure_ascii=False),
			)
			db.add(row)
			db.flush()
			return row.to_dict()

	def delete_speaking_session(self, session_id: int) -> bool:
		return self._delete(SpeakingPracticeSession, session_id)


def get_store(request: Request) -> SessionStore:
	return request.app.state.store

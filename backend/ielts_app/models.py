from __future__ import annotations
from datetime import datetime
from typing import Any, Dict
from sqlalchemy import Column, DateTime, Integer, Text
from .db import Base


class Lesson(Base):
	__tablename__ = "lessons"
	id = Column(Integer, primary_key=True, autoincrement=True)
	name = Column(Text, nullable=False)
	content = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"name": self.name,
			"content": self.content,
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}


class VocabularyLearningSession(Base):
	__tablename__ = "vocabulary_learning_sessions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	# Raw comma separated input as typed by the learner
	input_words = Column(Text, nullable=False)
	results_json = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"input_words": self.input_words,
			"results_json": self.results_json,
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}


class SpeakingPracticeSession(Base):
	__tablename__ = "speaking_practice_sessions"
	id = Column(Integer, primary_key=True, autoincrement=True)
	conversation_name = Column(Text, nullable=False)
	topic = Column(Text, nullable=False)
	results_json = Column(Text, nullable=False)
	created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"id": self.id,
			"conversation_name": self.conversation_name,
			"topic": self.topic,
			"results_json": self.results_json,
			"created_at": self.created_at.isoformat() if self.created_at else None,
		}

"""Client facade over the REST layer and the durable login session.

Reads degrade to an empty list when the API cannot be reached or answers
unexpectedly; writes raise so a caller never believes something was saved
when it was not.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from study_companion.client.envelope import BareEnvelope, ItemsEnvelope, decode_envelope, error_message
from study_companion.client.session import Session, SessionManager
from study_companion.client.storage import JsonFileStorage
from study_companion.config import load_client_config
from study_companion.errors import (
    MalformedResponse,
    RemoteRejected,
    RemoteUnavailable,
    StudyCompanionError,
    UnsupportedInput,
)
from study_companion.models import QuizHistoryEntry, QuizQuestion, StudyTask, Summary, User, utc_now_iso
from study_companion.services.document_service import classify_document, get_mime_type
from study_companion.stats import grade_quiz

logger = logging.getLogger(__name__)

# Shared by every caller without a login; see DESIGN.md.
ANONYMOUS_PARTITION = 'anonymous'


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: str


class ClientSessionStore:
    def __init__(self, config=None, *, storage=None, http=None):
        self._config = config or load_client_config()
        self._base_url = self._config.api_url.rstrip('/')
        self._timeout = self._config.http_timeout
        self._http = http if http is not None else requests.Session()
        if storage is None:
            storage = JsonFileStorage(self._config.session_file)
        self._sessions = SessionManager(storage)

    @property
    def sessions(self) -> SessionManager:
        return self._sessions

    # --- transport ---

    def _send(self, method, path, *, user_key=None, headers=None, **kwargs):
        request_headers = dict(self._sessions.auth_headers())
        if user_key is not None:
            request_headers['x-user-id'] = user_key
        request_headers.update(headers or {})
        try:
            return self._http.request(
                method,
                f"{self._base_url}{path}",
                headers=request_headers,
                timeout=self._timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise RemoteUnavailable(f"Could not reach the study service: {e}") from e

    @staticmethod
    def _envelope(response):
        try:
            payload = response.json()
        except ValueError:
            payload = None
        return decode_envelope(payload)

    def _call(self, method, path, **kwargs):
        response = self._send(method, path, **kwargs)
        envelope = self._envelope(response)
        if not 200 <= response.status_code < 300:
            raise RemoteRejected(response.status_code, error_message(envelope, ''))
        return envelope

    def _list(self, path, user_key, record_type):
        try:
            envelope = self._call('GET', path, params={'userId': user_key})
        except StudyCompanionError as e:
            logger.warning("Failed to fetch %s: %s", path, e.message)
            return []
        if not isinstance(envelope, ItemsEnvelope):
            logger.warning("Unexpected response shape from %s", path)
            return []
        records = []
        for item in envelope.items:
            if not isinstance(item, dict):
                continue
            try:
                records.append(record_type.from_dict(item))
            except (TypeError, ValueError) as e:
                logger.warning("Skipping malformed record from %s: %s", path, e)
        return records

    @staticmethod
    def _payload(envelope, field):
        if isinstance(envelope, BareEnvelope) and isinstance(envelope.payload, dict) and field in envelope.payload:
            return envelope.payload[field]
        raise MalformedResponse(f"Response is missing '{field}'.")

    # --- session ---

    def register(self, email: str, password: str) -> AuthResult:
        body = {'name': email.split('@')[0], 'email': email, 'password': password}
        try:
            response = self._send('POST', '/auth/register', json=body)
        except RemoteUnavailable as e:
            return AuthResult(False, e.message)
        if not 200 <= response.status_code < 300:
            return AuthResult(False, error_message(self._envelope(response), f'Registration failed: {response.status_code}'))
        return AuthResult(True, 'Registration successful.')

    def login(self, email: str, password: str, remember: bool = False) -> AuthResult:
        try:
            response = self._send('POST', '/auth/login', json={'email': email, 'password': password})
        except RemoteUnavailable as e:
            return AuthResult(False, e.message)
        envelope = self._envelope(response)
        if not 200 <= response.status_code < 300:
            return AuthResult(False, error_message(envelope, f'Login failed: {response.status_code}'))
        payload = envelope.payload if isinstance(envelope, BareEnvelope) else None
        if not isinstance(payload, dict):
            return AuthResult(False, f'Login failed: {response.status_code}')

        user = None
        if isinstance(payload.get('user'), dict) and payload['user'].get('email'):
            user = User(email=str(payload['user']['email']))
        self._sessions.begin(payload.get('token'), user, remember)
        logger.info("Signed in as %s (remember=%s)", user.email if user else '?', bool(remember))
        return AuthResult(True, 'Login successful.')

    def logout(self) -> None:
        self._sessions.clear()

    def current_user(self) -> Optional[Session]:
        session = self._sessions.session
        return session if session.user is not None else None

    def partition_key(self) -> str:
        session = self.current_user()
        return session.user.email if session else ANONYMOUS_PARTITION

    # --- reads ---

    def list_summaries(self, user_key: str) -> List[Summary]:
        return self._list('/summaries', user_key, Summary)

    def list_schedule(self, user_key: str) -> List[StudyTask]:
        return self._list('/schedules', user_key, StudyTask)

    def list_quiz_history(self, user_key: str) -> List[QuizHistoryEntry]:
        return self._list('/quiz/history', user_key, QuizHistoryEntry)

    # --- writes ---

    def add_summary(self, user_key: str, summary: Summary) -> List[Summary]:
        self._call('POST', '/summaries', user_key=user_key, json=summary.to_dict())
        return self.list_summaries(user_key)

    def add_quiz_history(self, user_key: str, entry: QuizHistoryEntry) -> List[QuizHistoryEntry]:
        self._call('POST', '/quiz/history', user_key=user_key, json=entry.to_dict())
        return self.list_quiz_history(user_key)

    def record_quiz_attempt(self, user_key: str, summary_title: str, questions: List[QuizQuestion], answers: List[Optional[str]]) -> List[QuizHistoryEntry]:
        """Grade the answers and append the result to the quiz history."""
        if not questions:
            raise ValueError('A quiz attempt needs at least one question.')
        entry = QuizHistoryEntry.from_score(summary_title, grade_quiz(questions, answers), len(questions))
        return self.add_quiz_history(user_key, entry)

    def save_schedule(self, user_key: str, tasks: List[StudyTask]) -> None:
        body = {'date': utc_now_iso(), 'tasks': [task.to_dict() for task in tasks]}
        self._call('POST', '/schedules', user_key=user_key, json=body)

    def save_summary_artifact(self, user_key: str, document_meta: Dict[str, Any], title: str, summary_text: str) -> Dict[str, Any]:
        body = dict(document_meta or {})
        body.update({'title': title, 'sum_notes': summary_text})
        response = self._send('POST', '/summaries/save', user_key=user_key, json=body)
        envelope = self._envelope(response)
        if not 200 <= response.status_code < 300:
            raise RemoteRejected(response.status_code, error_message(envelope, 'Failed to save summary to DB'))
        if not isinstance(envelope, BareEnvelope) or not isinstance(envelope.payload, dict):
            raise MalformedResponse('Unexpected response from summary save.')
        return envelope.payload

    # --- AI and documents ---

    def generate_summary(self, text: str) -> str:
        envelope = self._call('POST', '/ai/summary', json={'text': text})
        summary = self._payload(envelope, 'summary')
        if not isinstance(summary, str) or not summary.strip():
            raise MalformedResponse('The summary came back empty.')
        return summary

    def generate_quiz(self, summary_content: str, original_content: str) -> List[QuizQuestion]:
        envelope = self._call('POST', '/ai/quiz', json={'summaryContent': summary_content, 'originalContent': original_content})
        if not isinstance(envelope, ItemsEnvelope):
            raise MalformedResponse('Unexpected response from quiz generation.')
        questions = [QuizQuestion.from_dict(item) for item in envelope.items if isinstance(item, dict)]
        if not questions:
            raise MalformedResponse('No quiz questions were generated.')
        return questions

    def ask(self, question: str, summary_content: Optional[str] = None, original_content: Optional[str] = None) -> str:
        body = {'question': question}
        if summary_content:
            body['summaryContent'] = summary_content
        if original_content:
            body['originalContent'] = original_content
        answer = self._payload(self._call('POST', '/ai/answer', json=body), 'answer')
        if not isinstance(answer, str):
            raise MalformedResponse('Unexpected response from the assistant.')
        return answer

    def extract_document(self, path: str) -> Dict[str, Any]:
        filename = os.path.basename(path)
        mimetype = mimetypes.guess_type(filename)[0] or get_mime_type(filename)
        if not classify_document(filename, mimetype):
            raise UnsupportedInput('Unsupported file type.')
        with open(path, 'rb') as f:
            try:
                envelope = self._call('POST', '/documents/extract', files={'file': (filename, f, mimetype)})
            except RemoteRejected as e:
                if e.status == 415:
                    raise UnsupportedInput(e.message) from e
                raise
        if not isinstance(envelope, BareEnvelope) or not isinstance(envelope.payload, dict) or 'text' not in envelope.payload:
            raise MalformedResponse('Unexpected response from document extraction.')
        return envelope.payload

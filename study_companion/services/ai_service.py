"""Gemini-backed generation of summaries, quizzes and study answers.

Every function takes the ``google.genai`` client explicitly. Failures are
raised as ``RemoteUnavailable`` (the call itself failed) or
``MalformedResponse`` (the model answered with something unusable); an empty
result is never returned silently.
"""

import json

from google.genai import types

from study_companion.errors import MalformedResponse, RemoteUnavailable
from study_companion.services.prompt_registry import get_prompt_template

MAX_SOURCE_TEXT_LEN = 120000
MAX_TEXT_LEN = 2000
QUIZ_QUESTION_COUNT = 5
OPTIONS_PER_QUESTION = 4

QUIZ_RESPONSE_SCHEMA = types.Schema(
    type=types.Type.ARRAY,
    items=types.Schema(
        type=types.Type.OBJECT,
        properties={
            'question': types.Schema(type=types.Type.STRING, description='The quiz question.'),
            'options': types.Schema(
                type=types.Type.ARRAY,
                items=types.Schema(type=types.Type.STRING),
                description='An array of 4 possible answers.',
            ),
            'correctAnswer': types.Schema(type=types.Type.STRING, description='The correct answer from the options.'),
            'explanation': types.Schema(type=types.Type.STRING, description='A brief explanation of why the answer is correct.'),
        },
        required=['question', 'options', 'correctAnswer', 'explanation'],
    ),
)


def _generate(client, model, prompt_text, config, failure_message, logger=None):
    if client is None:
        raise RemoteUnavailable('AI service is not configured.')
    try:
        response = client.models.generate_content(
            model=model,
            contents=[types.Content(role='user', parts=[types.Part.from_text(text=prompt_text)])],
            config=config,
        )
    except Exception as exc:
        if logger is not None:
            logger.error(f"{failure_message} ({exc})")
        raise RemoteUnavailable(failure_message) from exc
    return (getattr(response, 'text', '') or '').strip()


def generate_summary(source_text, *, client, model, logger=None):
    prompt = get_prompt_template('summary').format(source_text=str(source_text or '')[:MAX_SOURCE_TEXT_LEN])
    text = _generate(
        client,
        model,
        prompt,
        types.GenerateContentConfig(temperature=0.3),
        'Failed to generate summary due to an API error. Check if your API key is valid.',
        logger,
    )
    if not text:
        raise MalformedResponse('Summary generation returned empty output.')
    return text


def strip_code_fence(raw_text):
    text = str(raw_text or '').strip()
    if text.startswith('```'):
        lines = text.splitlines()
        if len(lines) >= 3 and lines[-1].strip() == '```':
            text = '\n'.join(lines[1:-1]).strip()
    return text


def sanitize_quiz_questions(items, max_items):
    if not isinstance(items, list):
        return []
    cleaned = []
    seen = set()
    for item in items:
        if not isinstance(item, dict):
            continue
        question = str(item.get('question', '')).strip()[:MAX_TEXT_LEN]
        options = item.get('options', [])
        answer = str(item.get('correctAnswer', '')).strip()[:MAX_TEXT_LEN]
        explanation = str(item.get('explanation', '')).strip()[:MAX_TEXT_LEN]
        if not question or not isinstance(options, list) or len(options) != OPTIONS_PER_QUESTION or not answer:
            continue
        option_strings = [str(option).strip()[:MAX_TEXT_LEN] for option in options]
        if any(not option for option in option_strings):
            continue
        if len(set(option_strings)) != OPTIONS_PER_QUESTION:
            continue
        if answer not in option_strings:
            continue
        dedupe_key = question.lower()
        if dedupe_key in seen:
            continue
        seen.add(dedupe_key)
        cleaned.append({
            'question': question,
            'options': option_strings,
            'correctAnswer': answer,
            'explanation': explanation,
        })
        if len(cleaned) >= max_items:
            break
    return cleaned


def generate_quiz(summary_content, original_content, *, client, model, question_count=QUIZ_QUESTION_COUNT, logger=None):
    prompt = get_prompt_template('quiz').format(
        question_count=question_count,
        summary_content=str(summary_content or '')[:MAX_SOURCE_TEXT_LEN],
        original_content=str(original_content or '')[:MAX_SOURCE_TEXT_LEN],
    )
    raw = _generate(
        client,
        model,
        prompt,
        types.GenerateContentConfig(
            response_mime_type='application/json',
            response_schema=QUIZ_RESPONSE_SCHEMA,
        ),
        'Failed to generate quiz due to an API error. Check if your API key is valid.',
        logger,
    )
    try:
        parsed = json.loads(strip_code_fence(raw))
    except json.JSONDecodeError as exc:
        raise MalformedResponse('Failed to generate quiz: The AI returned an invalid JSON response.') from exc
    if not isinstance(parsed, list):
        raise MalformedResponse('AI returned data in an unexpected format.')
    questions = sanitize_quiz_questions(parsed, question_count)
    if not questions:
        raise MalformedResponse('Quiz questions were empty after validation.')
    return questions


def answer_question_from_notes(question, summary_content, original_content, *, client, model, logger=None):
    prompt = get_prompt_template('notes_answer').format(
        question=str(question or '').strip(),
        summary_content=str(summary_content or '')[:MAX_SOURCE_TEXT_LEN],
        original_content=str(original_content or '')[:MAX_SOURCE_TEXT_LEN],
    )
    text = _generate(
        client,
        model,
        prompt,
        types.GenerateContentConfig(temperature=0.1),
        'Failed to get an answer due to an API error. Check if your API key is valid.',
        logger,
    )
    if not text:
        raise MalformedResponse('The assistant returned an empty answer.')
    return text


def chat_with_assistant(question, *, client, model, logger=None):
    prompt = get_prompt_template('assistant_chat').format(question=str(question or '').strip())
    text = _generate(
        client,
        model,
        prompt,
        types.GenerateContentConfig(temperature=0.6),
        'Failed to get assistant response.',
        logger,
    )
    if not text:
        raise MalformedResponse('The assistant returned an empty answer.')
    return text

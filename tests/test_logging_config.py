import json
import logging

from study_companion.logging_config import log_event


def test_log_event_emits_json(caplog):
    logger = logging.getLogger("study_companion.test")

    with caplog.at_level(logging.INFO, logger="study_companion.test"):
        log_event(logger, logging.INFO, "summary_saved", user_id="a@example.com", size=3)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload == {"event": "summary_saved", "user_id": "a@example.com", "size": 3}

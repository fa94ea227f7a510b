"""Tests for structured logging setup."""

import json
import logging
import sys

import pytest
from loguru import logger

from salon_booking.core.logger import correlation_id_ctx, setup_structured_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    logger.remove()
    logger.configure(patcher=lambda record: None)
    logger.add(sys.stderr)
    logging.root.handlers = []


def read_json_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines() if line.strip()]


def test_json_sink_carries_correlation_id(tmp_path):
    setup_structured_logging("INFO", json_format=True, logs_dir=tmp_path)

    token = correlation_id_ctx.set("req-42")
    try:
        logger.info("draft created")
    finally:
        correlation_id_ctx.reset(token)
    logger.info("outside request")

    records = read_json_lines(tmp_path / "salon_booking.jsonl")
    by_message = {r["record"]["message"]: r["record"] for r in records}
    assert by_message["draft created"]["extra"]["correlation_id"] == "req-42"
    assert "correlation_id" not in by_message["outside request"]["extra"]


def test_stdlib_logging_is_intercepted(tmp_path):
    setup_structured_logging("INFO", json_format=True, logs_dir=tmp_path)

    logging.getLogger("uvicorn.error").warning("port in use")

    messages = [r["record"]["message"] for r in read_json_lines(tmp_path / "salon_booking.jsonl")]
    assert "port in use" in messages


def test_text_sink_and_level(tmp_path):
    setup_structured_logging("WARNING", json_format=False, logs_dir=tmp_path)

    logger.info("hidden")
    logger.warning("shown")

    text = (tmp_path / "salon_booking.log").read_text()
    assert "shown" in text
    assert "hidden" not in text
    assert not (tmp_path / "salon_booking.jsonl").exists()

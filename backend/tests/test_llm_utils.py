"""Tests for app.services.llm_utils."""

import json

import pytest

from app.services.llm_utils import extract_json_object


class TestExtractJsonObject:
    """JSON extraction from LLM text responses."""

    def test_pure_json(self):
        obj = {"scores": {"overallRiskScore": 5}, "vulnerabilities": []}
        assert extract_json_object(json.dumps(obj)) == obj

    def test_fenced_json(self):
        text = 'Here is the analysis:\n```json\n{"key": "value"}\n```\nDone.'
        assert extract_json_object(text) == {"key": "value"}

    def test_bare_fence(self):
        text = '```\n{"key": "value"}\n```'
        assert extract_json_object(text) == {"key": "value"}

    def test_raw_object_with_preamble(self):
        text = 'Sure! {"name": "Acme"} Let me know if you need more.'
        assert extract_json_object(text) == {"name": "Acme"}

    def test_fence_preferred_over_raw(self):
        text = '{"raw": true}\n```json\n{"fenced": true}\n```'
        assert extract_json_object(text) == {"fenced": True}

    def test_empty_text_raises(self):
        with pytest.raises(json.JSONDecodeError):
            extract_json_object("   ")

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            extract_json_object("no json here at all")

    def test_array_rejected(self):
        with pytest.raises(TypeError):
            extract_json_object("[1, 2, 3]")

#!/usr/bin/env python3
"""
Postprocessing Tests

TEST COVERAGE:
    - JSON extraction from LLM replies
    - Reply confidence heuristic
    - Quality score normalization
"""

import sys
import os
import unittest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from support_backend.app.postprocess import (
    calculate_confidence,
    clean_json_reply,
    normalize_quality,
    parse_json_reply,
)


class TestParseJsonReply(unittest.TestCase):

    def test_plain_json(self):
        self.assertEqual(parse_json_reply('{"score": 0.4}'), {"score": 0.4})

    def test_code_fenced_json(self):
        reply = '```json\n{"label": "negative"}\n```'
        self.assertEqual(clean_json_reply(reply), '{"label": "negative"}')
        self.assertEqual(parse_json_reply(reply), {"label": "negative"})

    def test_json_inside_prose(self):
        reply = 'Here is the analysis: {"score": -0.5, "label": "negative"} Hope it helps.'
        self.assertEqual(parse_json_reply(reply), {"score": -0.5, "label": "negative"})

    def test_no_object(self):
        with self.assertRaises(ValueError):
            parse_json_reply("I cannot help with that")

    def test_non_object_json(self):
        with self.assertRaises(ValueError):
            parse_json_reply("[1, 2, 3]")


class TestConfidence(unittest.TestCase):

    def test_scales_with_length(self):
        choice = {"message": {"content": "x" * 500}, "finish_reason": "stop"}
        self.assertAlmostEqual(calculate_confidence(choice), 0.7)

    def test_capped(self):
        choice = {"message": {"content": "x" * 5000}, "finish_reason": "stop"}
        self.assertAlmostEqual(calculate_confidence(choice), 0.9)

    def test_truncated_choice(self):
        choice = {"message": {"content": "x" * 500}, "finish_reason": "length"}
        self.assertEqual(calculate_confidence(choice), 0.5)

    def test_empty_content(self):
        self.assertEqual(calculate_confidence({"message": {"content": ""}, "finish_reason": "stop"}), 0.5)


class TestNormalizeQuality(unittest.TestCase):

    def test_fills_missing_overall(self):
        payload = {"clarity": 8, "completeness": 6, "tone": 7, "accuracy": 9, "actionability": 5}
        self.assertEqual(normalize_quality(payload)["overall"], 7.0)

    def test_keeps_given_overall(self):
        payload = {"overall": 9, "clarity": 1, "completeness": 1, "tone": 1, "accuracy": 1, "actionability": 1}
        self.assertEqual(normalize_quality(payload)["overall"], 9)

    def test_incomplete_criteria_left_alone(self):
        self.assertNotIn("overall", normalize_quality({"clarity": 8}))


if __name__ == '__main__':
    unittest.main()

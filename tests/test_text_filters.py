from __future__ import annotations

import unittest

from pipeline.text_filters import sanitize_content, sanitize_text
from schemas.outreach import OutreachContent


class SanitizeTextTests(unittest.TestCase):
    def test_em_and_en_dashes_become_commas(self):
        self.assertEqual(sanitize_text("Great event—truly"), "Great event, truly")
        self.assertEqual(sanitize_text("May 1–May 3"), "May 1, May 3")

    def test_double_hyphen_becomes_comma(self):
        self.assertEqual(sanitize_text("quick note--thanks"), "quick note, thanks")

    def test_collapses_double_commas_and_trailing_comma(self):
        self.assertEqual(sanitize_text("Hi there, —friend"), "Hi there, friend")
        self.assertEqual(sanitize_text("Talk soon —"), "Talk soon")

    def test_empty_values_pass_through(self):
        self.assertIsNone(sanitize_text(None))
        self.assertEqual(sanitize_text(""), "")

    def test_single_hyphen_is_kept(self):
        self.assertEqual(sanitize_text("turn-key service"), "turn-key service")


class SanitizeContentTests(unittest.TestCase):
    def test_dm_and_call_script_fall_back_to_linkedin(self):
        content = OutreachContent(linkedin_message="Hi Sam—loved your venue")
        cleaned = sanitize_content(content)
        self.assertEqual(cleaned.linkedin_message, "Hi Sam, loved your venue")
        self.assertEqual(cleaned.social_media_post, "Hi Sam, loved your venue")
        self.assertEqual(cleaned.call_script, "Hi Sam, loved your venue")

    def test_proof_points_are_sanitized(self):
        content = OutreachContent(proof_points=["Insured—licensed", "5-star reviews"])
        self.assertEqual(sanitize_content(content).proof_points, ["Insured, licensed", "5-star reviews"])

    def test_existing_dm_is_kept(self):
        content = OutreachContent(linkedin_message="LinkedIn copy", social_media_post="DM copy")
        self.assertEqual(sanitize_content(content).social_media_post, "DM copy")


if __name__ == "__main__":
    unittest.main()

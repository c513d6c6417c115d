import sys
import unittest
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from job_referral.core.config import settings  # noqa: E402
from job_referral.core.errors import PortalError  # noqa: E402
from job_referral.portal.playwright_portal import PlaywrightFormPortal, open_portal_session  # noqa: E402


class FakeLocator:
    async def all(self):
        return []


class FakePage:
    def __init__(self, raw_fields=None):
        self.raw_fields = raw_fields or []

    def locator(self, selector, **kwargs):
        return FakeLocator()

    async def evaluate(self, script):
        return self.raw_fields


class PlaywrightPortalTests(unittest.IsolatedAsyncioTestCase):
    async def test_form_labels_are_cleaned_and_markers_mark_required(self):
        page = FakePage(
            [
                {"label": "氏名 必須", "type": "text", "required": False},
                {"label": "メールアドレス", "type": "email", "required": True},
                {"label": "備考 任意", "type": "textarea", "required": False},
                {"label": "氏名 必須", "type": "text", "required": False},
                {"label": "＊", "type": "text", "required": False},
            ]
        )
        portal = PlaywrightFormPortal(page, settle_delay_ms=0, timeout_ms=1000)
        fields = await portal.read_required_fields()

        self.assertEqual([item.name for item in fields], ["氏名", "メールアドレス", "備考"])
        self.assertEqual([item.required for item in fields], [True, True, False])
        self.assertEqual(fields[2].type, "textarea")

    async def test_selecting_a_missing_posting_fails_without_raising(self):
        portal = PlaywrightFormPortal(FakePage(), settle_delay_ms=0, timeout_ms=1000)
        self.assertEqual(await portal.list_postings(), [])
        selection = await portal.select_posting("法人営業")
        self.assertFalse(selection.success)
        self.assertIn("法人営業", selection.error)

    async def test_session_requires_portal_url(self):
        with self.assertRaises(PortalError):
            async with open_portal_session(replace(settings, portal_url=None)):
                pass


if __name__ == "__main__":
    unittest.main()

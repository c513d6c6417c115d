from __future__ import annotations

import asyncio
import logging
import re
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from job_referral.core.config import Settings, settings
from job_referral.core.errors import PortalError
from job_referral.schemas import FormField

from .base import PortalSession, SelectionResult

logger = logging.getLogger(__name__)

RECOMMEND_BUTTON_TEXT = "この職種に推薦する"
NAME_CELL_SELECTORS = (
    ".agent-requisitions-table-list__cell.--name a",
    "td:first-child a",
)
REQUIRED_MARKERS = ("必須", "*", "＊")
_LABEL_NOISE_RE = re.compile(r"(必須|任意|[*＊])")

# Runs in the page: one entry per label-like element of the recommendation form.
_READ_FORM_FIELDS_JS = """
() => {
  const fields = [];
  const labels = document.querySelectorAll('form label, form legend, form [class*="label"]');
  for (const label of labels) {
    const text = (label.innerText || label.textContent || '').trim();
    if (!text) continue;
    let control = null;
    const forId = label.getAttribute('for');
    if (forId) control = document.getElementById(forId);
    if (!control) {
      const group = label.closest('div, fieldset, li, tr');
      if (group) control = group.querySelector('input, textarea, select');
    }
    let type = 'text';
    let required = false;
    if (control) {
      type = control.tagName.toLowerCase() === 'input' ? (control.getAttribute('type') || 'text') : control.tagName.toLowerCase();
      required = control.required || control.getAttribute('aria-required') === 'true';
    }
    fields.push({ label: text, type: type, required: required });
  }
  return fields;
}
"""


class PlaywrightFormPortal:
    """Form portal adapter driving an already-open Playwright page."""

    def __init__(self, page: Page, *, settle_delay_ms: int, timeout_ms: int):
        self._page = page
        self._settle_delay_s = max(settle_delay_ms, 0) / 1000
        self._timeout_ms = timeout_ms

    async def _settle(self) -> None:
        await asyncio.sleep(self._settle_delay_s)

    async def _row_title(self, row: Any) -> str | None:
        for selector in NAME_CELL_SELECTORS:
            anchor = row.locator(selector)
            if await anchor.count() == 0:
                continue
            text = (await anchor.first.inner_text(timeout=self._timeout_ms)).strip()
            if text:
                return text
        return None

    async def _posting_rows(self) -> list[Any]:
        button = self._page.locator("button", has_text=RECOMMEND_BUTTON_TEXT)
        return await self._page.locator("tr", has=button).all()

    async def list_postings(self) -> list[str]:
        try:
            await self._settle()
            titles: list[str] = []
            for row in await self._posting_rows():
                title = await self._row_title(row)
                if title and title not in titles:
                    titles.append(title)
        except PlaywrightError as exc:
            raise PortalError(f"Failed to read postings: {exc}") from exc
        logger.info("portal_postings count=%s", len(titles))
        return titles

    async def select_posting(self, title: str) -> SelectionResult:
        try:
            for row in await self._posting_rows():
                if await self._row_title(row) != title:
                    continue
                await row.locator("button", has_text=RECOMMEND_BUTTON_TEXT).first.click(timeout=self._timeout_ms)
                await self._page.wait_for_load_state("networkidle", timeout=self._timeout_ms)
                logger.info("portal_posting_selected title=%s", title)
                return SelectionResult(success=True)
        except PlaywrightError as exc:
            raise PortalError(f"Failed to select posting '{title}': {exc}") from exc
        return SelectionResult(success=False, error=f"Posting '{title}' has no recommend button on the page.")

    async def read_required_fields(self) -> list[FormField]:
        try:
            await self._settle()
            raw_fields = await self._page.evaluate(_READ_FORM_FIELDS_JS)
        except PlaywrightError as exc:
            raise PortalError(f"Failed to read form fields: {exc}") from exc

        fields: list[FormField] = []
        seen: set[str] = set()
        for item in raw_fields or []:
            label = str(item.get("label", ""))
            name = _LABEL_NOISE_RE.sub("", label).strip()
            if not name or name in seen:
                continue
            seen.add(name)
            required = bool(item.get("required")) or any(marker in label for marker in REQUIRED_MARKERS)
            fields.append(FormField(name=name, type=str(item.get("type") or "text"), required=required))
        logger.info(
            "portal_form_fields count=%s required=%s",
            len(fields),
            sum(1 for item in fields if item.required),
        )
        return fields


@asynccontextmanager
async def open_portal_session(config: Settings = settings) -> AsyncIterator[PortalSession]:
    """Launch a browser, open the portal listing and yield a session; the browser closes on exit."""
    if not config.portal_url:
        raise PortalError("PORTAL_URL is not configured.")

    try:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=config.portal_headless)
            try:
                page = await browser.new_page()
                await page.goto(
                    config.portal_url,
                    wait_until="networkidle",
                    timeout=config.portal_navigation_timeout_ms,
                )
                logger.info("portal_opened url=%s", config.portal_url)
                portal = PlaywrightFormPortal(
                    page,
                    settle_delay_ms=config.portal_settle_delay_ms,
                    timeout_ms=config.portal_navigation_timeout_ms,
                )
                yield PortalSession(portal=portal, url=config.portal_url)
            finally:
                await browser.close()
    except PlaywrightError as exc:
        raise PortalError(f"Portal navigation failed: {exc}") from exc

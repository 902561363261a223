"""DOM extraction helpers for the tee sheet frame."""

from __future__ import annotations

from typing import List

from playwright.async_api import Frame

from tracking import t

from automation.shared.booking_contracts import SlotRow, ViewSnapshot
from infrastructure.constants import (
    SLOT_CAPACITY_SELECTOR,
    SLOT_HANDLE_ATTRIBUTE,
    SLOT_INDICATOR_SELECTOR,
    SLOT_ROW_SELECTOR,
    SLOT_TIME_SELECTOR,
)


async def extract_page_text(frame: Frame) -> str:
    """Return the visible text of the frame's body."""

    t('automation.availability.dom_extraction.extract_page_text')
    text = await frame.evaluate("() => document.body ? document.body.innerText : ''")
    return (text or "").strip()


async def count_slot_indicators(frame: Frame) -> int:
    t('automation.availability.dom_extraction.count_slot_indicators')
    return await frame.locator(SLOT_INDICATOR_SELECTOR).count()


async def snapshot_view(frame: Frame) -> ViewSnapshot:
    t('automation.availability.dom_extraction.snapshot_view')
    return ViewSnapshot(
        text=await extract_page_text(frame),
        slot_indicator_count=await count_slot_indicators(frame),
    )


async def scrape_slot_rows(frame: Frame) -> List[SlotRow]:
    """Return open tee sheet rows and tag each time cell with a handle attribute."""

    t('automation.availability.dom_extraction.scrape_slot_rows')
    raw_rows = await frame.evaluate(
        """([rowSelector, timeSelector, capacitySelector, handleAttribute]) => {
            const rows = [];
            document.querySelectorAll(rowSelector).forEach((row, index) => {
                const timeDiv = row.querySelector(timeSelector);
                if (!timeDiv) return;
                const capacity = row.querySelector(capacitySelector);
                const handle = `slot-${index}`;
                timeDiv.setAttribute(handleAttribute, handle);
                rows.push({
                    time: (timeDiv.textContent || '').trim(),
                    capacity: capacity ? (capacity.textContent || '').trim() : '',
                    handle,
                });
            });
            return rows;
        }""",
        [SLOT_ROW_SELECTOR, SLOT_TIME_SELECTOR, SLOT_CAPACITY_SELECTOR, SLOT_HANDLE_ATTRIBUTE],
    )
    return [
        SlotRow(time_text=row["time"], capacity_text=row["capacity"], handle=row["handle"])
        for row in raw_rows or []
    ]


def handle_selector(handle: str) -> str:
    return f'[{SLOT_HANDLE_ATTRIBUTE}="{handle}"]'

from datetime import date

from automation.availability.page_state import classify_page_state, format_release_date
from automation.shared.booking_contracts import PageState, ViewSnapshot
from tracking import t


PLAY_DATE = date(2025, 6, 15)
NO_RESULTS = "Your search returned no times to be displayed"


def test_release_notice_wins_over_no_results_text():
    t('tests.unit.test_page_state.test_release_notice_wins_over_no_results_text')
    snapshot = ViewSnapshot(
        text=f"Tee times will become available on June 15, 2025 at 7:00 AM\n{NO_RESULTS}",
        slot_indicator_count=0,
    )

    assert classify_page_state(snapshot, PLAY_DATE) is PageState.TOO_EARLY


def test_release_notice_for_another_date_is_ignored():
    snapshot = ViewSnapshot(text="will become available on June 16, 2025 at 7:00 AM\n" + NO_RESULTS)

    assert classify_page_state(snapshot, PLAY_DATE) is PageState.NO_RESULTS


def test_release_notice_with_other_release_time():
    snapshot = ViewSnapshot(text="will become available on June 15, 2025 at 6:30 PM")

    assert classify_page_state(snapshot, PLAY_DATE) is PageState.TOO_EARLY


def test_no_results_beats_slot_indicators():
    snapshot = ViewSnapshot(text=NO_RESULTS, slot_indicator_count=4)

    assert classify_page_state(snapshot, PLAY_DATE) is PageState.NO_RESULTS


def test_slot_indicators_mean_ready():
    snapshot = ViewSnapshot(text="8:00 AM 4 Players", slot_indicator_count=12)

    assert classify_page_state(snapshot, PLAY_DATE) is PageState.READY


def test_blank_view_is_loading():
    assert classify_page_state(ViewSnapshot(text=""), PLAY_DATE) is PageState.LOADING


def test_release_date_format_has_no_zero_padding():
    assert format_release_date(date(2025, 7, 4)) == "July 4, 2025"

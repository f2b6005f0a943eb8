from crowdfund.domain.entities import CampaignStatus
from crowdfund.viewmodels.status_format import (
    apt_label,
    days_left_label,
    deadline_label,
    progress_label,
    status_label,
)


def test_status_label():
    assert status_label(CampaignStatus.ACTIVE) == "Active"
    assert status_label(CampaignStatus.SUCCESSFUL) == "Successful"
    assert status_label(None) == "Unknown"


def test_amount_and_progress_labels():
    assert apt_label(123_456_789) == "1.23 APT"
    assert progress_label(33.333) == "33.3%"
    assert progress_label(float("inf")) == "-"
    assert progress_label("x") == "0.0%"


def test_days_left_label():
    assert days_left_label(5) == "5 days left"
    assert days_left_label(1, CampaignStatus.ACTIVE) == "1 day left"
    assert days_left_label(0) == "Ended"
    assert days_left_label(4, CampaignStatus.FAILED) == "Ended"


def test_deadline_label_is_utc_date():
    assert deadline_label(0) == "1970-01-01"
    assert deadline_label("soon") == ""
    assert deadline_label(10**20) == ""

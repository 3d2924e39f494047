import os
import tempfile
from datetime import date

# Окружение должно быть готово до импорта adsboard: настройки и engine создаются при импорте
_TMP_DIR = tempfile.mkdtemp(prefix="adsboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DATA_URL"] = "http://feed.example/ads"

import pytest  # noqa: E402
from sqlalchemy import delete  # noqa: E402

from adsboard.db.models import User  # noqa: E402
from adsboard.db.session import SessionLocal  # noqa: E402
from adsboard.db.setup import ensure_schema  # noqa: E402
from adsboard.services.records import NormalizedRecord, cost_metric_for, ratio  # noqa: E402


def make_record(**overrides) -> NormalizedRecord:
    values = {
        "date": date(2024, 6, 1),
        "campaign": "Spring Sale",
        "ad_name": "Banner A",
        "platform": "Facebook",
        "objective": "Click",
        "impressions": 1000,
        "clicks": 50,
        "installs": 0,
        "follows": 0,
        "engagement": 0,
        "spent": 500.0,
        "budget": 2000.0,
    }
    values.update(overrides)
    values.setdefault("ctr", ratio(values["clicks"], values["impressions"], 100))
    values.setdefault(
        "cost_metric",
        cost_metric_for(
            values["objective"],
            values["impressions"],
            values["clicks"],
            values["installs"],
            values["engagement"],
            values["spent"],
        ),
    )
    return NormalizedRecord(**values)


@pytest.fixture
def raw_feed():
    return [
        {
            "Date": "6/1/2024",
            "Core Campaign Name": "Spring Sale",
            "Ads Campaign Name": "Banner A",
            "Platform": "Facebook",
            "Objective": "Click",
            "Impression": "1,000",
            "Click": "50",
            "Install": "0",
            "Follow": "3",
            "Engagement": "120",
            "Spent": "500",
            "Budget": "2,000",
            "Device Target": "Mobile",
            "Segment": "18-24",
        },
        {
            "Date": "6/3/2024",
            "Core Campaign Name": "Spring Sale",
            "Ads Campaign Name": "Video B",
            "Platform": "TikTok",
            "Objective": "Impression",
            "Impression": "3,000",
            "Click": "50",
            "Install": "0",
            "Follow": "0",
            "Engagement": "40",
            "Spent": "1,500.50",
            "Budget": "3,000",
            "Device Target": "All",
            "Segment": "25-34",
        },
        {
            "Date": "5/20/2024",
            "Core Campaign Name": "App Push",
            "Ads Campaign Name": "Install Card",
            "Platform": "Facebook",
            "Objective": "Install",
            "Impression": "10,000",
            "Click": "400",
            "Install": "80",
            "Follow": "0",
            "Engagement": "0",
            "Spent": "4,000",
            "Budget": "5,000",
            "Device Target": "Android",
            "Segment": "All",
        },
        {
            "Date": "not a date",
            "Core Campaign Name": "Broken",
            "Ads Campaign Name": "Broken Ad",
            "Platform": "Facebook",
            "Objective": "Click",
            "Impression": "1",
            "Click": "1",
            "Install": "0",
            "Follow": "0",
            "Engagement": "0",
            "Spent": "1",
            "Budget": "1",
            "Device Target": "",
            "Segment": "",
        },
    ]


@pytest.fixture
def db_session():
    ensure_schema()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.execute(delete(User))
        session.commit()
        session.close()

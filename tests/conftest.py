"""
Shared fixtures for the cvmatch test suite.
"""
from datetime import date

import pytest

from cvmatch.config import load_rules
from cvmatch.models import CVProfile, Education, Experience, JobPosting, PersonalInfo


@pytest.fixture
def rules():
    """The packaged rule tables"""
    return load_rules()


@pytest.fixture
def today():
    """A fixed reference date so date-dependent scores are reproducible"""
    return date(2024, 6, 1)


@pytest.fixture
def developer_cv():
    """A reasonably complete software developer CV"""
    return CVProfile(
        personal=PersonalInfo(
            full_name="Thandi Nkosi",
            job_title="Software Developer",
            email="thandi@example.co.za",
            phone="+27 82 555 0101",
            location="Cape Town",
        ),
        summary="Software developer with 6 years of experience building cloud APIs.",
        experience=(
            Experience(
                title="Senior Developer",
                company="Takealot",
                start_date="2020-01-01",
                end_date="2024-01-01",
                description="Developed 12 microservices in Python\nLed a team of 4 engineers",
            ),
            Experience(
                title="Developer",
                company="Entelect",
                start_date="2018-01-01",
                end_date="2020-01-01",
                description="Implemented React dashboards used by 300 clients\nImproved test coverage by 40%",
            ),
        ),
        education=(
            Education(degree="BSc Computer Science", institution="UCT", graduation_date="2017"),
        ),
        skills="Python, JavaScript, React, SQL, AWS, Docker",
        projects=("Open source CLI for invoice parsing", "Personal finance tracker"),
    )


@pytest.fixture
def make_job():
    """Factory for postings with sensible defaults"""
    def _make(**overrides):
        fields = {"title": "Software Developer", "company": "Acme"}
        fields.update(overrides)
        return JobPosting(**fields)
    return _make

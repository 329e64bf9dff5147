"""
Test cases for record parsing and serialisation
"""
import pytest

from cvmatch.models import CVProfile, InvalidRecordError, JobPosting, Preferences, Skill


class TestCVProfile:
    """Test cases for CVProfile"""

    def test_from_camel_case(self):
        cv = CVProfile.from_dict({
            "personalInfo": {"fullName": "Naledi Mokoena", "jobTitle": "Analyst", "location": "Sandton"},
            "experience": [{"title": "Analyst", "company": "Nedbank", "startDate": "2021-02", "endDate": "Present"}],
            "education": [{"degree": "BCom", "institution": "UJ", "graduationDate": "2020"}],
            "skills": "Excel, SQL\nPower BI",
            "expectedSalary": "450000",
            "beeCandidate": True,
        })
        assert cv.personal.full_name == "Naledi Mokoena"
        assert cv.experience[0].end_date == "Present"
        assert cv.education[0].graduation_date == "2020"
        assert cv.skill_names == ["Excel", "SQL", "Power BI"]
        assert cv.expected_salary == 450000
        assert cv.bee_candidate is True

    def test_from_snake_case(self):
        cv = CVProfile.from_dict({"personal_info": {"full_name": "Naledi"}, "expected_salary": 1})
        assert cv.personal.full_name == "Naledi"
        assert cv.expected_salary == 1

    def test_structured_skills(self):
        cv = CVProfile.from_dict({"skills": [{"name": "Python", "category": "technical"}, "Go", {"name": ""}]})
        assert cv.skills == (Skill(name="Python", category="technical"), Skill(name="Go"))
        assert cv.skills_text == "Python, Go"

    def test_blank_skills(self):
        assert CVProfile.from_dict({"skills": "   "}).skill_names == []

    def test_rejects_non_mapping(self):
        with pytest.raises(InvalidRecordError):
            CVProfile.from_dict("Naledi Mokoena")

    def test_to_dict_uses_camel_case(self):
        data = CVProfile(skills=(Skill(name="Python"),)).to_dict()
        assert data["personalInfo"]["fullName"] is None
        assert data["skills"] == [{"name": "Python", "category": None}]


class TestJobPosting:
    """Test cases for JobPosting"""

    def test_title_required(self):
        with pytest.raises(InvalidRecordError):
            JobPosting(title="  ")
        with pytest.raises(InvalidRecordError):
            JobPosting.from_dict({"company": "Absa"})

    def test_salary_range_mapping(self):
        job = JobPosting.from_dict({"title": "Dev", "salaryRange": {"min": 1, "max": 2, "currency": "USD"}})
        assert (job.salary_min, job.salary_max, job.currency) == (1, 2, "USD")

    def test_salary_text(self):
        job = JobPosting.from_dict({"title": "Dev", "salary": "R30,000 - R40,000 pm"})
        assert job.salary == "R30,000 - R40,000 pm"
        assert job.salary_min is None

    def test_province_uppercased(self):
        assert JobPosting.from_dict({"title": "Dev", "province": "gp"}).province == "GP"

    def test_text_joins_fields(self):
        job = JobPosting(title="Dev", description="Build APIs", requirements=("Go",))
        assert job.text == "Dev Build APIs Go"

    def test_round_trip_keys(self):
        data = JobPosting(title="Dev", experience_years=3).to_dict()
        assert data["experienceYears"] == 3
        assert JobPosting.from_dict(data).experience_years == 3


def test_preferences_from_dict():
    prefs = Preferences.from_dict({"preferredProvinces": ["wc", "gp"], "minSalary": "300000"})
    assert prefs.preferred_provinces == ("WC", "GP")
    assert prefs.min_salary == 300000
    assert Preferences.from_dict(None) == Preferences()


class TestLenientFields:
    """Malformed numbers and flags degrade instead of raising"""

    @pytest.mark.parametrize("raw,expected", [
        ("R30,000", 30000),
        ("R 450 000", 450000),
        ("450000", 450000),
        (450000.4, 450000),
        ("negotiable", None),
        ("", None),
        (True, None),
    ])
    def test_expected_salary(self, raw, expected):
        assert CVProfile.from_dict({"expectedSalary": raw}).expected_salary == expected

    @pytest.mark.parametrize("raw,expected", [("5+", 5), ("3", 3), ("several", None)])
    def test_experience_years(self, raw, expected):
        job = JobPosting.from_dict({"title": "Dev", "experienceYears": raw})
        assert job.experience_years == expected

    @pytest.mark.parametrize("raw,expected", [("82.5", 83), (70, 70), ("high", None)])
    def test_ats_score(self, raw, expected):
        assert JobPosting.from_dict({"title": "Dev", "atsScore": raw}).ats_score == expected

    def test_salary_bounds(self):
        job = JobPosting.from_dict({"title": "Dev", "salaryMin": "negotiable", "salaryMax": "R40,000"})
        assert job.salary_min is None
        assert job.salary_max == 40000

    def test_zero_bound_is_kept(self):
        job = JobPosting.from_dict({"title": "Intern", "salaryRange": {"min": 0, "max": 5000}, "salaryMin": 900})
        assert job.salary_min == 0

    def test_salary_range_not_a_mapping(self):
        job = JobPosting.from_dict({"title": "Dev", "salaryRange": "R1 - R2"})
        assert job.salary_min is None

    def test_preference_salaries(self):
        prefs = Preferences.from_dict({"minSalary": "R300,000", "maxSalary": "open"})
        assert prefs.min_salary == 300000
        assert prefs.max_salary is None

    @pytest.mark.parametrize("raw,expected", [
        ("false", False), ("False", False), ("no", False), ("0", False),
        ("true", True), ("Yes", True), (True, True), (0, False), ("maybe", False),
    ])
    def test_string_flags(self, raw, expected):
        assert CVProfile.from_dict({"beeCandidate": raw}).bee_candidate is expected
        assert JobPosting.from_dict({"title": "Dev", "beeRequirement": raw}).bee_requirement is expected

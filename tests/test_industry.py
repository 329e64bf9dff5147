"""
Test cases for industry detection and rule lookup
"""
from cvmatch.industry import classify_cv, classify_text, resolve_for_job, rules_for
from cvmatch.models import CVProfile


class TestClassifier:
    """Test cases for classify_text"""

    def test_technology_text(self, rules):
        assert classify_text("Software developer building cloud services", rules).id == "Technology"

    def test_banking_text(self, rules):
        text = "Credit risk analyst at a bank, focused on compliance and audit"
        assert classify_text(text, rules).id == "Banking"

    def test_counts_occurrences(self, rules):
        text = "patient patient patient care and software"
        assert classify_text(text, rules).id == "Healthcare"

    def test_tie_goes_to_first_declared(self, rules):
        assert classify_text("bank software", rules).id == "Banking"

    def test_whole_words_only(self, rules):
        # "capital" contains "api" but is not the keyword
        assert classify_text("capital", rules).id == rules.default_industry

    def test_falls_back_to_default(self, rules):
        assert classify_text("landscape gardener", rules).id == "Technology"

    def test_classify_cv(self, rules, developer_cv):
        assert classify_cv(developer_cv, rules).id == "Technology"


class TestRuleLookup:
    """Test cases for rules_for and resolve_for_job"""

    def test_case_insensitive(self, rules):
        assert rules_for("banking", rules).id == "Banking"

    def test_unknown_industry_uses_default(self, rules):
        assert rules_for("Retail", rules).id == "Technology"

    def test_job_industry_wins(self, rules, developer_cv, make_job):
        job = make_job(industry="Mining")
        assert resolve_for_job(developer_cv, job, rules).id == "Mining"

    def test_unknown_job_industry_uses_cv(self, rules, make_job):
        cv = CVProfile(summary="Registered nurse in clinical patient care")
        job = make_job(industry="Hospitality")
        assert resolve_for_job(cv, job, rules).id == "Healthcare"

"""
Test cases for skills gaps and recommendations
"""
from cvmatch.gaps import analyze_gaps, learning_resources, skill_priority
from cvmatch.models import CVProfile, JobPosting, KeywordMatch
from cvmatch.recommendations import improvement_suggestions, match_reasons, recommendations


def _match(keyword, in_cv=False, category="technical"):
    return KeywordMatch(keyword=keyword, in_cv=in_cv, weight=1.5, category=category)


class TestGaps:
    """Test cases for analyze_gaps"""

    def test_only_unmatched_keywords(self, rules):
        gaps = analyze_gaps([_match("python", in_cv=True), _match("docker")], rules)
        assert [g.skill for g in gaps] == ["docker"]

    def test_priority_and_learning_time(self, rules):
        gaps = analyze_gaps([
            _match("cloud"),
            _match("leadership", category="soft"),
            _match("office", category="general"),
        ], rules)
        assert [g.priority for g in gaps] == ["high", "medium", "low"]
        assert [g.estimated_time_to_learn for g in gaps] == ["2-4 weeks", "1-3 weeks", "3-7 days"]

    def test_capped(self, rules):
        gaps = analyze_gaps([_match(f"skill{i}") for i in range(25)], rules)
        assert len(gaps) == rules.gap_limit
        assert gaps[0].skill == "skill0"

    def test_resources(self, rules):
        assert learning_resources("Python", rules)[0] == "Python.org Tutorial"
        assert learning_resources("cobol", rules) == rules.default_resources

    def test_industry_keywords_are_high_priority(self):
        assert skill_priority("industry") == "high"
        assert skill_priority("unknown") == "low"


class TestRecommendations:
    """Test cases for recommendations, reasons and suggestions"""

    def test_weak_match(self, rules):
        matches = [_match("cloud"), _match("docker")]
        out = recommendations(40, matches, analyze_gaps(matches, rules))
        assert out == [
            "Consider gaining more relevant experience before applying",
            "Focus on learning these key skills: cloud, docker",
            "Address high-priority skill gaps: cloud, docker",
            "Consider building more relevant experience before applying",
        ]

    def test_strong_match(self):
        assert recommendations(75, [], []) == ["Your profile is a strong match - consider applying soon"]

    def test_fair_match_ignores_general_gaps(self, rules):
        matches = [_match("office", category="general")]
        out = recommendations(60, matches, analyze_gaps(matches, rules))
        assert out == ["Highlight transferable skills and relevant experience in your application"]

    def test_reasons(self):
        cv = CVProfile(languages=("English", "isiZulu"), bee_candidate=True)
        job = JobPosting(title="Teller", bee_requirement=True, language_requirements=("isizulu",))
        reasons = match_reasons(cv, job, skills=85, experience=100, location=30, salary=50, ats=70)
        assert reasons == [
            "Strong skills match (85%)",
            "Experience level matches",
            "BEE requirements met",
            "Language requirements met",
        ]

    def test_unmet_language(self):
        cv = CVProfile(languages=("English",))
        job = JobPosting(title="Teller", language_requirements=("Afrikaans",))
        assert match_reasons(cv, job, skills=0, experience=0, location=0, salary=0, ats=0) == []

    def test_suggestions(self):
        assert improvement_suggestions(skills=40, experience=100, ats=65) == [
            "Add missing skills to your CV",
            "Optimize CV for ATS systems",
        ]

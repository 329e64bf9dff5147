"""
Test cases for the tokenizer and skill resolver
"""
import pytest

from cvmatch.text import levenshtein, similarity, skills_match, tokenize


class TestTokenize:
    """Test cases for tokenize"""

    def test_lowercases_and_drops_noise(self, rules):
        """Stopwords, punctuation and short tokens are removed"""
        tokens = tokenize("The Senior Python developer, with 5 years of AWS!", rules)
        assert tokens == ["senior", "python", "developer", "aws"]

    def test_keeps_duplicates_in_order(self, rules):
        assert tokenize("sql SQL python", rules) == ["sql", "sql", "python"]

    def test_empty_and_none(self, rules):
        assert tokenize("", rules) == []
        assert tokenize(None, rules) == []


class TestEditDistance:
    """Test cases for levenshtein and similarity"""

    def test_classic_example(self):
        assert levenshtein("kitten", "sitting") == 3

    def test_empty_strings(self):
        assert levenshtein("", "abc") == 3
        assert similarity("", "") == 1.0

    def test_similarity_normalized_by_longer(self):
        assert similarity("javascript", "javascrpt") == pytest.approx(0.9)
        assert similarity("kitten", "sitting") == pytest.approx(4 / 7)


class TestSkillsMatch:
    """Test cases for skills_match"""

    @pytest.mark.parametrize("a,b", [
        ("javascript", "js"),
        ("kubernetes", "k8s"),
        ("java", "javascript"),
        ("management", "managment"),
        ("Python", "python"),
        ("amazon web services", "AWS"),
    ])
    def test_matches(self, rules, a, b):
        assert skills_match(a, b, rules)

    @pytest.mark.parametrize("a,b", [
        ("sql", "react"),
        ("go", "mongo"),
        ("", "python"),
        (None, "python"),
        ("excel", "docker"),
    ])
    def test_non_matches(self, rules, a, b):
        assert not skills_match(a, b, rules)

    @pytest.mark.parametrize("a,b", [
        ("js", "javascript"),
        ("sql", "mysql"),
        ("react", "reactjs"),
        ("teamwork", "team"),
        ("python", "pyhton"),
        ("c", "c++"),
        ("devops", "docker"),
    ])
    def test_symmetric(self, rules, a, b):
        assert skills_match(a, b, rules) == skills_match(b, a, rules)

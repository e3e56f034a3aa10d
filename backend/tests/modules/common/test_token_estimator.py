"""Tests for token estimation."""

import pytest

from ragcore.modules.common.utils.token_estimator import DEFAULT_CHARS_PER_TOKEN, TokenEstimator, estimate_tokens


class TestTokenEstimator:
    """Test TokenEstimator."""

    @pytest.fixture
    def estimator(self):
        return TokenEstimator()

    def test_default_ratio(self, estimator):
        assert estimator.chars_per_token == DEFAULT_CHARS_PER_TOKEN == 3.5

    def test_empty_text_is_zero(self, estimator):
        assert estimator.estimate("") == 0

    def test_rounds_up(self, estimator):
        # 12 / 3.5 = 3.43
        assert estimator.estimate("Hello world!") == 4
        assert estimator.estimate("a") == 1

    def test_exact_multiple(self, estimator):
        assert estimator.estimate("x" * 35) == 10

    def test_fits(self, estimator):
        assert estimator.fits("x" * 35, 10)
        assert not estimator.fits("x" * 36, 10)

    def test_tokens_to_chars_floors(self, estimator):
        assert estimator.tokens_to_chars(7200) == 25200
        assert estimator.tokens_to_chars(9) == 31

    def test_custom_ratio(self):
        assert TokenEstimator(4.0).estimate("x" * 10) == 3

    @pytest.mark.parametrize("ratio", [0, -1.5])
    def test_invalid_ratio(self, ratio):
        with pytest.raises(ValueError):
            TokenEstimator(ratio)

    def test_module_level_helper(self):
        assert estimate_tokens("x" * 70) == 20
        assert estimate_tokens("x" * 70, chars_per_token=7.0) == 10

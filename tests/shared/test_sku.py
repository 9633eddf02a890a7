import pytest
from protean.exceptions import ValidationError

from storefront.shared.sku import normalize_sku


class TestNormalizeSku:
    def test_upper_cases_and_strips(self):
        assert normalize_sku("  shoe-run-42 ") == "SHOE-RUN-42"

    @pytest.mark.parametrize("code", ["AB", "HAS SPACE", "-LEADING", "TRAILING-", "DOUBLE--HYPHEN", ""])
    def test_rejects_malformed_codes(self, code):
        with pytest.raises(ValidationError) as exc:
            normalize_sku(code)
        assert "sku" in exc.value.messages

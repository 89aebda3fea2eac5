"""Tests for Required Minimum Distribution calculations."""

from core.rmd import calculate_rmd, get_rmd_divisor, rmd_start_age
from core.tax_config import RMD_START_AGES, RMD_UNIFORM_LIFETIME_TABLE


class TestRMDStartAge:
    """Tests for the SECURE 2.0 start age."""

    def test_default_start_age(self):
        """Unknown birth year starts RMDs at 73."""
        assert rmd_start_age() == 73
        assert rmd_start_age(None) == RMD_START_AGES.default

    def test_born_1950_or_earlier(self):
        """Born 1950 or earlier starts at 72."""
        assert rmd_start_age(1950) == 72
        assert rmd_start_age(1945) == 72

    def test_born_1951_to_1959(self):
        """Born 1951 through 1959 starts at 73."""
        assert rmd_start_age(1951) == 73
        assert rmd_start_age(1959) == 73

    def test_born_1960_or_later(self):
        """Born 1960 or later starts at 75."""
        assert rmd_start_age(1960) == 75
        assert rmd_start_age(1970) == 75


class TestCalculateRMD:
    """Tests for calculate_rmd."""

    def test_zero_before_default_start_age(self):
        """No RMD before 73 when birth year is unknown."""
        assert calculate_rmd(70, 1_000_000) == 0
        assert calculate_rmd(71, 1_000_000) == 0
        assert calculate_rmd(72, 1_000_000) == 0

    def test_positive_from_73(self):
        """RMD applies from 73."""
        assert calculate_rmd(73, 1_000_000) > 0

    def test_birth_year_1950_starts_at_72(self):
        """Birth year 1950 brings RMDs forward to 72."""
        assert calculate_rmd(72, 1_000_000, 1950) > 0
        assert calculate_rmd(71, 1_000_000, 1950) == 0

    def test_birth_year_1955_starts_at_73(self):
        """Birth year 1955 starts at 73."""
        assert calculate_rmd(73, 1_000_000, 1955) > 0
        assert calculate_rmd(72, 1_000_000, 1955) == 0

    def test_birth_year_1960_starts_at_75(self):
        """Birth year 1960 or later defers RMDs to 75."""
        assert calculate_rmd(75, 1_000_000, 1960) > 0
        assert calculate_rmd(74, 1_000_000, 1960) == 0
        assert calculate_rmd(73, 1_000_000, 1965) == 0

    def test_age_73(self):
        """Divisor 26.5 at 73."""
        assert abs(calculate_rmd(73, 1_000_000) - 37_735.85) < 0.01

    def test_age_75(self):
        """Divisor 24.6 at 75."""
        assert abs(calculate_rmd(75, 1_000_000) - 40_650.41) < 0.01

    def test_age_80(self):
        """Divisor 20.2 at 80."""
        assert abs(calculate_rmd(80, 1_000_000) - 49_504.95) < 0.01

    def test_age_90(self):
        """Divisor 12.2 at 90."""
        assert abs(calculate_rmd(90, 1_000_000) - 81_967.21) < 0.01

    def test_age_100(self):
        """Divisor 6.4 at 100."""
        assert abs(calculate_rmd(100, 1_000_000) - 156_250) < 0.01

    def test_zero_balance(self):
        """Zero prior-year balance gives zero RMD."""
        assert calculate_rmd(75, 0) == 0

    def test_negative_balance(self):
        """Negative prior-year balance gives zero RMD."""
        assert calculate_rmd(75, -1000) == 0


class TestRMDDivisor:
    """Tests for divisor lookup and extrapolation."""

    def test_table_lookup(self):
        """Ages in the table return the table value."""
        for age, divisor in RMD_UNIFORM_LIFETIME_TABLE.items():
            assert get_rmd_divisor(age) == divisor

    def test_age_120(self):
        """Last table age uses divisor 2.0."""
        assert abs(calculate_rmd(120, 1_000_000) - 500_000) < 0.01

    def test_extrapolation_beyond_table(self):
        """Past 120 the divisor shrinks by 0.1 per year."""
        assert abs(get_rmd_divisor(125) - 1.5) < 1e-9
        assert calculate_rmd(125, 1_000_000) > calculate_rmd(120, 1_000_000)

    def test_extrapolation_floor(self):
        """Extrapolated divisor never drops below 1.0."""
        assert get_rmd_divisor(140) == 1.0
        assert get_rmd_divisor(200) == 1.0

    def test_divisors_decrease_with_age(self):
        """Older owners must withdraw a larger share."""
        ages = sorted(RMD_UNIFORM_LIFETIME_TABLE)
        for younger, older in zip(ages, ages[1:]):
            assert get_rmd_divisor(older) <= get_rmd_divisor(younger)

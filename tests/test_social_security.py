"""Tests for Social Security benefit and taxability calculations."""

from core.social_security import (
    SSTaxability,
    calculate_ss_benefit,
    calculate_ss_taxable,
    claim_age_factor,
)
from core.tax_config import SSTaxThresholds

FRA_AMOUNT = 30_000


class TestClaimAgeAdjustment:
    """Tests for the claiming-age benefit multiplier."""

    def test_claim_at_62(self):
        """Claiming at 62 cuts the benefit by 30%."""
        assert abs(calculate_ss_benefit(62, FRA_AMOUNT, 62, 0, 0) - 21_000) < 0.01

    def test_claim_at_63(self):
        """Claiming at 63 cuts the benefit by 25%."""
        assert abs(calculate_ss_benefit(63, FRA_AMOUNT, 63, 0, 0) - 22_500) < 0.01

    def test_claim_at_64(self):
        """Claiming at 64 cuts the benefit by 20%."""
        assert abs(calculate_ss_benefit(64, FRA_AMOUNT, 64, 0, 0) - 24_000) < 0.01

    def test_claim_at_65(self):
        """Claiming at 65 cuts the benefit by about 13.3%."""
        assert abs(calculate_ss_benefit(65, FRA_AMOUNT, 65, 0, 0) - 26_001) < 0.5

    def test_claim_at_66(self):
        """Claiming at 66 cuts the benefit by about 6.7%."""
        assert abs(calculate_ss_benefit(66, FRA_AMOUNT, 66, 0, 0) - 27_999) < 0.5

    def test_claim_at_fra(self):
        """Claiming at 67 pays the full benefit."""
        assert calculate_ss_benefit(67, FRA_AMOUNT, 67, 0, 0) == 30_000

    def test_claim_at_68(self):
        """Delaying to 68 adds 8%."""
        assert abs(calculate_ss_benefit(68, FRA_AMOUNT, 68, 0, 0) - 32_400) < 0.01

    def test_claim_at_69(self):
        """Delaying to 69 adds 16%."""
        assert abs(calculate_ss_benefit(69, FRA_AMOUNT, 69, 0, 0) - 34_800) < 0.01

    def test_claim_at_70(self):
        """Delaying to 70 adds 24%."""
        assert abs(calculate_ss_benefit(70, FRA_AMOUNT, 70, 0, 0) - 37_200) < 0.01

    def test_unlisted_claim_age_factor(self):
        """Ages outside 62-70 fall back to the full benefit."""
        assert claim_age_factor(71) == 1.0
        assert claim_age_factor(60) == 1.0


class TestBenefitTiming:
    """Tests for when benefits are paid and how they grow."""

    def test_zero_before_claim_age(self):
        """Nothing is paid before the claim age."""
        assert calculate_ss_benefit(62, FRA_AMOUNT, 67, 0, 0) == 0
        assert calculate_ss_benefit(66, FRA_AMOUNT, 67, 0, 0) == 0

    def test_paid_from_claim_age(self):
        """Benefits start at the claim age and continue."""
        assert calculate_ss_benefit(67, FRA_AMOUNT, 67, 0, 0) == 30_000
        assert calculate_ss_benefit(68, FRA_AMOUNT, 67, 1, 0) == 30_000

    def test_cola(self):
        """Benefits grow with inflation from the simulation start."""
        assert calculate_ss_benefit(67, FRA_AMOUNT, 67, 0, 0.03) == 30_000
        assert abs(calculate_ss_benefit(68, FRA_AMOUNT, 67, 1, 0.03) - 30_900) < 0.01
        expected = 30_000 * 1.03**5
        assert abs(calculate_ss_benefit(72, FRA_AMOUNT, 67, 5, 0.03) - expected) < 0.01

    def test_cola_counts_from_simulation_start(self):
        """COLA compounds from year zero, not from the claim year."""
        benefit = calculate_ss_benefit(67, FRA_AMOUNT, 67, 5, 0.03)
        assert abs(benefit - 30_000 * 1.03**5) < 0.01


class TestSSTaxability:
    """Tests for the taxable portion of benefits."""

    def test_below_first_threshold(self):
        """Provisional income under $25k makes nothing taxable."""
        result = calculate_ss_taxable(6_000, 20_000)
        assert result.taxable == 0
        assert result.provisional_income == 23_000

    def test_at_first_threshold(self):
        """Exactly $25k provisional income makes nothing taxable."""
        result = calculate_ss_taxable(6_000, 22_000)
        assert result.taxable == 0
        assert result.provisional_income == 25_000

    def test_between_thresholds(self):
        """Half of the excess over $25k is taxable."""
        result = calculate_ss_taxable(6_000, 27_000)
        assert abs(result.taxable - 2_500) < 0.01
        assert result.provisional_income == 30_000

    def test_first_tier_capped_at_half_of_benefits(self):
        """Between thresholds at most 50% of benefits is taxable."""
        result = calculate_ss_taxable(6_000, 31_000)
        assert result.taxable <= 3_000

    def test_high_income(self):
        """High income reaches the 85% cap."""
        result = calculate_ss_taxable(30_000, 50_000)
        assert abs(result.taxable - 25_500) < 0.01
        assert result.provisional_income == 65_000

    def test_very_high_income_capped(self):
        """Taxable benefits never exceed 85%."""
        result = calculate_ss_taxable(30_000, 200_000)
        assert abs(result.taxable - 25_500) < 0.01

    def test_partial_second_tier(self):
        """Above $34k: first tier plus 85% of the excess over $34k."""
        result = calculate_ss_taxable(20_000, 30_000)
        # provisional 40,000: 4,500 + 0.85 * 6,000
        assert abs(result.taxable - 9_600) < 0.01

    def test_first_tier_limited_by_small_benefit(self):
        """A small benefit limits the first tier to half the benefit."""
        result = calculate_ss_taxable(4_000, 40_000)
        # first tier min(4,500, 2,000) + 0.85 * 8,000, capped at 3,400
        assert abs(result.taxable - 3_400) < 0.01

    def test_zero_benefits(self):
        """No benefits means nothing taxable."""
        result = calculate_ss_taxable(0, 100_000)
        assert result.taxable == 0

    def test_custom_thresholds(self):
        """Thresholds can be supplied explicitly."""
        joint = SSTaxThresholds(first=32_000, second=44_000)
        result = calculate_ss_taxable(6_000, 27_000, joint)
        assert result.taxable == 0

    def test_effective_rate(self):
        """Effective rate is taxable over gross."""
        taxability = SSTaxability(taxable=25_500, provisional_income=65_000)
        assert abs(taxability.effective_rate(30_000) - 0.85) < 1e-9
        assert taxability.effective_rate(0) == 0.0

"""
Tests for the Commission Distribution Calculator.

Covers:
- STAFF referrers with percentage and fixed rewards
- CONTACT referrers and promises without a referrer
- Pool conservation and the fixed reward cap
- Inactive quotes and discounted quotes in the pool base
- Rate normalization (ratios and whole percents)
"""

from decimal import Decimal

import pytest

from pricing_engines.commission import (
    CommissionDistributionCalculator,
    DistributionRule,
)
from pricing_kernel.domain.attribution import Attribution, ReferrerType
from pricing_kernel.domain.policy import CommissionPolicy, RewardType
from pricing_kernel.domain.quote import Discount, QuoteStatus
from pricing_kernel.domain.values import Money


def mxn(amount) -> Money:
    return Money.of(str(amount), "MXN")


STAFF = Attribution(
    promise_id="p-1",
    sales_agent_id="agent-1",
    referrer_id="staff-9",
    referrer_type=ReferrerType.STAFF,
)


def _policy(rate="0.05", reward_type=RewardType.PERCENTAGE, reward="0.5") -> CommissionPolicy:
    return CommissionPolicy(
        sales_commission_rate=Decimal(rate),
        referral_reward_type=reward_type,
        referral_reward_value=Decimal(reward),
    )


class TestStaffPercentage:
    """STAFF referrer, 50000 closed, 5% commission, half to the referrer."""

    def setup_method(self):
        self.calculator = CommissionDistributionCalculator()

    def test_even_split(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(),
        )

        assert result.total_quote_amount == mxn("50000")
        assert result.commission_pool == mxn("2500")
        assert result.sales_agent_amount == mxn("1250")
        assert result.referrer_amount == mxn("1250")
        assert result.rule == DistributionRule.STAFF_PERCENTAGE
        assert result.referrer_id == "staff-9"

    def test_whole_percent_reward_normalized(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(reward="50"),
        )
        assert result.referrer_amount == mxn("1250")

    def test_whole_percent_rate_normalized(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(rate="5"),
        )
        assert result.commission_pool == mxn("2500")

    def test_full_reward(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(reward="1"),
        )
        assert result.referrer_amount == mxn("2500")
        assert result.sales_agent_amount == Money.zero("MXN")


class TestStaffFixed:

    def setup_method(self):
        self.calculator = CommissionDistributionCalculator()

    def test_fixed_reward(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(reward_type=RewardType.FIXED, reward="1000"),
        )
        assert result.referrer_amount == mxn("1000")
        assert result.sales_agent_amount == mxn("1500")
        assert result.rule == DistributionRule.STAFF_FIXED

    def test_fixed_reward_capped_at_pool(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(reward_type=RewardType.FIXED, reward="3000"),
        )
        assert result.referrer_amount == mxn("2500")
        assert result.sales_agent_amount == Money.zero("MXN")

    def test_zero_fixed_reward(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=STAFF,
            policy=_policy(reward_type=RewardType.FIXED, reward="0"),
        )
        assert result.referrer_amount == Money.zero("MXN")
        assert result.sales_agent_amount == mxn("2500")


class TestNonStaffReferrers:

    def setup_method(self):
        self.calculator = CommissionDistributionCalculator()

    def test_contact_referrer_gets_nothing(self, make_quote):
        attribution = Attribution(
            promise_id="p-2",
            sales_agent_id="agent-1",
            referrer_id="contact-3",
            referrer_type=ReferrerType.CONTACT,
        )
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=attribution,
            policy=_policy(reward="1"),
        )
        assert result.referrer_amount == Money.zero("MXN")
        assert result.sales_agent_amount == result.commission_pool
        assert result.rule == DistributionRule.CONTACT

    def test_no_referrer(self, make_quote):
        attribution = Attribution(promise_id="p-3", sales_agent_id="agent-1")
        result = self.calculator.distribute(
            quotes=[make_quote(price="50000")],
            attribution=attribution,
            policy=_policy(),
        )
        assert result.rule == DistributionRule.NO_REFERRER
        assert result.sales_agent_amount == mxn("2500")

    def test_unattributed_pool_logged(self, make_quote, captured_logs):
        attribution = Attribution(promise_id="p-4")
        result = self.calculator.distribute(
            quotes=[make_quote(price="1000")],
            attribution=attribution,
            policy=_policy(),
        )
        assert not result.is_attributed
        assert any(r["message"] == "commission_pool_unattributed" for r in captured_logs())


class TestPoolBase:

    def setup_method(self):
        self.calculator = CommissionDistributionCalculator()

    def test_inactive_quotes_skipped(self, make_quote):
        quotes = [
            make_quote(price="30000", status=QuoteStatus.APPROVED),
            make_quote(price="20000", archived=True),
            make_quote(price="10000", status=QuoteStatus.REJECTED),
            make_quote(price="5000", status=QuoteStatus.CANCELLED),
        ]
        result = self.calculator.distribute(quotes=quotes, attribution=STAFF, policy=_policy())
        assert result.total_quote_amount == mxn("30000")
        assert result.active_quote_count == 1

    def test_discounts_reduce_the_base(self, make_quote):
        quotes = [
            make_quote(price="20000", discount=Discount.percent("10")),
            make_quote(price="1000", discount=Discount.amount("5000")),
        ]
        result = self.calculator.distribute(quotes=quotes, attribution=STAFF, policy=_policy())
        assert result.total_quote_amount == mxn("18000")
        assert result.commission_pool == mxn("900")

    def test_all_inactive_gives_zero_pool(self, make_quote):
        result = self.calculator.distribute(
            quotes=[make_quote(price="1000", archived=True)],
            attribution=STAFF,
            policy=_policy(),
        )
        assert result.commission_pool == Money.zero("MXN")
        assert result.referrer_amount == Money.zero("MXN")

    def test_empty_quotes_with_currency(self):
        result = self.calculator.distribute(
            quotes=[], attribution=STAFF, policy=_policy(), currency="MXN"
        )
        assert result.commission_pool == Money.zero("MXN")

    def test_empty_quotes_without_currency(self):
        with pytest.raises(ValueError, match="currency"):
            self.calculator.distribute(quotes=[], attribution=STAFF, policy=_policy())

    @pytest.mark.parametrize(
        "reward_type,reward",
        [
            (RewardType.PERCENTAGE, "0.33"),
            (RewardType.PERCENTAGE, "70"),
            (RewardType.FIXED, "123.45"),
            (RewardType.FIXED, "99999"),
        ],
    )
    def test_pool_conserved(self, make_quote, reward_type, reward):
        result = self.calculator.distribute(
            quotes=[make_quote(price="33333.33")],
            attribution=STAFF,
            policy=_policy(reward_type=reward_type, reward=reward),
        )
        split = result.sales_agent_amount + result.referrer_amount
        assert split.is_close_to(result.commission_pool)
        assert result.referrer_amount <= result.commission_pool

import pytest

from collateral_auction.config import RAD, RAY, WAD
from collateral_auction.core.auction import Auction, DiscountSchedule
from collateral_auction.core.bid_processor import (
    cap_bid,
    get_adjusted_bid,
    get_bought_collateral,
    is_valid_bid_size,
    plan_fill,
)
from collateral_auction.core.errors import AuctionHouseError, FailureReason

MINIMUM_BID = 5 * WAD


def make_auction(amount_to_sell=10 * WAD, amount_to_raise=1000 * RAD):
    schedule = DiscountSchedule(max_discount=95 * WAD // 100, per_second_discount_update_rate=RAY,
                                discount_increase_deadline=1_003_600)
    return Auction(auction_id=1, amount_to_sell=amount_to_sell, amount_to_raise=amount_to_raise,
                   current_discount=95 * WAD // 100, schedule=schedule, start_time=1_000_000,
                   forgone_collateral_receiver='vault-owner', auction_income_recipient='accounting-engine')


class TestAdjustedBid:
    def test_bid_size_rules(self):
        assert is_valid_bid_size(5 * WAD, MINIMUM_BID)
        assert not is_valid_bid_size(5 * WAD - 1, MINIMUM_BID)
        assert not is_valid_bid_size(0, 0)

    def test_missing_auction_is_invalid(self):
        assert get_adjusted_bid(None, 10 * WAD, MINIMUM_BID) == (False, 10 * WAD)

    def test_bid_below_minimum_is_invalid(self):
        assert get_adjusted_bid(make_auction(), 4 * WAD, MINIMUM_BID) == (False, 4 * WAD)

    def test_bid_within_raise_is_unchanged(self):
        assert get_adjusted_bid(make_auction(), 50 * WAD, MINIMUM_BID) == (True, 50 * WAD)

    def test_oversized_bid_is_capped_one_unit_above_the_raise(self):
        auction = make_auction()
        assert cap_bid(auction, 2000 * WAD) == 1000 * WAD + 1
        assert get_adjusted_bid(auction, 2000 * WAD, MINIMUM_BID) == (True, 1000 * WAD + 1)

    def test_bid_leaving_dust_is_invalid(self):
        auction = make_auction(amount_to_raise=10 * RAD + RAY // 2)
        assert get_adjusted_bid(auction, 10 * WAD, MINIMUM_BID) == (False, 10 * WAD)

    def test_bid_leaving_exactly_one_ray_is_valid(self):
        auction = make_auction(amount_to_raise=10 * RAD + RAY)
        assert get_adjusted_bid(auction, 10 * WAD, MINIMUM_BID) == (True, 10 * WAD)


class TestBoughtCollateral:
    def test_bought_at_discounted_price(self):
        assert get_bought_collateral(make_auction(), 190 * WAD, 5 * WAD) == 5 * WAD * WAD // (190 * WAD)

    def test_bought_is_capped_to_collateral_for_sale(self):
        assert get_bought_collateral(make_auction(amount_to_sell=WAD), 190 * WAD, 500 * WAD) == WAD


class TestPlanFill:
    def test_partial_fill(self):
        auction = make_auction()
        fill = plan_fill(auction, 5 * WAD, 5 * WAD, WAD // 10)
        assert not fill.settled
        assert fill.amount_to_sell == 10 * WAD - WAD // 10
        assert fill.amount_to_raise == 995 * RAD
        assert fill.buffer_reduction == 5 * RAD
        assert fill.leftover_collateral == 0
        assert fill.coins_paid == 5 * RAD

    def test_raise_met_settles_and_reports_full_raise(self):
        auction = make_auction()
        fill = plan_fill(auction, 2000 * WAD, 1000 * WAD + 1, 6 * WAD)
        assert fill.settled
        assert fill.amount_to_raise == 0
        assert fill.buffer_reduction == 1000 * RAD
        assert fill.leftover_collateral == 4 * WAD

    def test_sold_out_reports_the_whole_remaining_raise(self):
        auction = make_auction(amount_to_sell=WAD)
        fill = plan_fill(auction, 500 * WAD, 500 * WAD, WAD)
        assert fill.settled
        assert fill.amount_to_sell == 0
        assert fill.amount_to_raise == 500 * RAD
        assert fill.buffer_reduction == 1000 * RAD

    def test_nothing_bought_is_refused(self):
        with pytest.raises(AuctionHouseError) as excinfo:
            plan_fill(make_auction(), 5 * WAD, 5 * WAD, 0)
        assert excinfo.value.reason is FailureReason.NULL_BOUGHT_AMOUNT

    def test_dusty_remainder_is_refused(self):
        auction = make_auction(amount_to_raise=10 * RAD + RAY // 2)
        with pytest.raises(AuctionHouseError) as excinfo:
            plan_fill(auction, 10 * WAD, 10 * WAD, WAD // 100)
        assert excinfo.value.reason is FailureReason.INVALID_LEFT_TO_RAISE

    def test_planning_does_not_touch_the_record(self):
        auction = make_auction()
        plan_fill(auction, 5 * WAD, 5 * WAD, WAD // 10)
        assert auction.amount_to_sell == 10 * WAD
        assert auction.amount_to_raise == 1000 * RAD

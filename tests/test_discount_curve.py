from hypothesis import given, settings, strategies as st

from collateral_auction.config import RAD, RAY, WAD
from collateral_auction.core.auction import Auction, DiscountSchedule
from collateral_auction.core.discount_curve import get_next_current_discount, update_current_discount
from collateral_auction.core.fixed_point import rmultiply, rpower

START = 1_000_000
RATE = 999_900_000_000_000_000_000_000_000  # 0.9999 per second
MIN_DISCOUNT = 95 * WAD // 100
MAX_DISCOUNT = 80 * WAD // 100


def make_auction(current_discount=MIN_DISCOUNT, max_discount=MAX_DISCOUNT, rate=RATE, timeline=3600):
    schedule = DiscountSchedule(max_discount=max_discount, per_second_discount_update_rate=rate,
                                discount_increase_deadline=START + timeline)
    return Auction(auction_id=1, amount_to_sell=10 * WAD, amount_to_raise=1000 * RAD,
                   current_discount=current_discount, schedule=schedule, start_time=START,
                   forgone_collateral_receiver='vault-owner', auction_income_recipient='accounting-engine')


def test_absent_auction_has_neutral_discount():
    assert get_next_current_discount(None, START) == RAY


def test_no_time_elapsed_keeps_starting_discount():
    assert get_next_current_discount(make_auction(), START) == MIN_DISCOUNT


def test_discount_decays_per_second():
    auction = make_auction()
    expected = rmultiply(rpower(RATE, 60, RAY), MIN_DISCOUNT)
    assert get_next_current_discount(auction, START + 60) == expected
    assert MAX_DISCOUNT < expected < MIN_DISCOUNT


def test_discount_clamps_at_max_before_deadline():
    # 0.9999 ** 3000 ~ 0.74, well past 0.80 / 0.95
    assert get_next_current_discount(make_auction(), START + 3000) == MAX_DISCOUNT


def test_deadline_snaps_to_max_even_without_decay():
    auction = make_auction(rate=RAY)
    assert get_next_current_discount(auction, START + 3599) == MIN_DISCOUNT
    assert get_next_current_discount(auction, START + 3600) == MAX_DISCOUNT


def test_uninitialized_discount_snaps_to_max():
    auction = make_auction(current_discount=0)
    assert get_next_current_discount(auction, START + 1) == MAX_DISCOUNT


def test_update_persists_discount_and_time():
    auction = make_auction()
    discount = update_current_discount(auction, START + 120)
    assert auction.current_discount == discount
    assert auction.latest_discount_update_time == START + 120
    # Evaluation continues from the stored point
    assert get_next_current_discount(auction, START + 120) == discount


@settings(max_examples=60, deadline=None)
@given(st.lists(st.integers(min_value=0, max_value=900), min_size=1, max_size=12))
def test_discount_is_monotonic_and_saturates(gaps):
    auction = make_auction()
    now = START
    previous = auction.current_discount
    for gap in gaps:
        now += gap
        discount = update_current_discount(auction, now)
        assert discount <= previous
        assert discount >= MAX_DISCOUNT
        previous = discount
    if now >= START + 3600:
        assert previous == MAX_DISCOUNT


@settings(max_examples=60, deadline=None)
@given(st.integers(min_value=0, max_value=5000), st.integers(min_value=0, max_value=5000))
def test_later_evaluation_never_gives_smaller_buyer_discount(t1, t2):
    auction = make_auction()
    early, late = sorted((t1, t2))
    assert get_next_current_discount(auction, START + late) <= get_next_current_discount(auction, START + early)

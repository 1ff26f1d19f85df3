# collateral_auction/core/auction.py

from dataclasses import dataclass

from .. import config


@dataclass(frozen=True)
class DiscountSchedule:
    """Discount parameters copied from the auction house settings when an auction starts."""
    max_discount: int
    per_second_discount_update_rate: int
    discount_increase_deadline: int


class Auction:
    """Represents a single increasing-discount collateral auction."""
    def __init__(self, auction_id: int, amount_to_sell: int, amount_to_raise: int,
                 current_discount: int, schedule: DiscountSchedule, start_time: int,
                 forgone_collateral_receiver: str, auction_income_recipient: str):
        self.id = auction_id
        self.amount_to_sell = int(amount_to_sell)   # WAD of collateral still for sale
        self.amount_to_raise = int(amount_to_raise) # RAD of coins still owed
        self.current_discount = int(current_discount)
        self.latest_discount_update_time = int(start_time)
        self.schedule = schedule
        self.forgone_collateral_receiver = forgone_collateral_receiver
        self.auction_income_recipient = auction_income_recipient

        # Bookkeeping for analysis, never read by the pricing path
        self.start_time = int(start_time)
        self.initial_amount_to_sell = int(amount_to_sell)
        self.initial_amount_to_raise = int(amount_to_raise)
        self.bids = []

    @property
    def max_discount(self) -> int:
        return self.schedule.max_discount

    @property
    def per_second_discount_update_rate(self) -> int:
        return self.schedule.per_second_discount_update_rate

    @property
    def discount_increase_deadline(self) -> int:
        return self.schedule.discount_increase_deadline

    @property
    def exists(self) -> bool:
        return self.amount_to_sell > 0 and self.amount_to_raise > 0

    def snapshot(self) -> dict:
        """Mutable fields, used to restore the record when an operation is rolled back."""
        return {
            'amount_to_sell': self.amount_to_sell,
            'amount_to_raise': self.amount_to_raise,
            'current_discount': self.current_discount,
            'latest_discount_update_time': self.latest_discount_update_time,
            'bids': list(self.bids),
        }

    def restore(self, snapshot: dict):
        for field_name, value in snapshot.items():
            setattr(self, field_name, value)

    def __repr__(self):
        return (f"Auction(id={self.id}, sell={self.amount_to_sell / config.WAD:.4f}, "
                f"raise={self.amount_to_raise / config.RAD:.2f}, "
                f"discount={self.current_discount / config.WAD:.4f}, "
                f"max_discount={self.max_discount / config.WAD:.4f})")

# collateral_auction/core/auction_house.py

import time
from contextlib import contextmanager
from dataclasses import dataclass, field

from .. import config
from . import bid_processor
from .auction import Auction, DiscountSchedule
from .discount_curve import get_next_current_discount, update_current_discount
from .errors import AuctionHouseError, FailureReason
from .fixed_point import RAY, add
from .price_reconciler import PriceReconciler
from .settings import AuctionHouseSettings


@dataclass
class AuctionEvent:
    name: str
    auction_id: int | None
    timestamp: int
    data: dict = field(default_factory=dict)
    auction: Auction | None = None


class IncreasingDiscountCollateralAuctionHouse:
    """
    Sells confiscated collateral at a discount to its oracle price that grows
    over time, accepting partial bids until the raise target is met or the
    collateral runs out (start, buy, preview, terminate, settle).

    Every public operation is atomic: it either completes with all of its
    ledger and debt-buffer effects, or raises ``AuctionHouseError`` and
    leaves auction records, the ledger and the buffer exactly as they were.
    """
    COLLABORATOR_PARAMETERS = ('oracle_relayer', 'collateral_fsm', 'system_coin_oracle', 'liquidation_engine')

    def __init__(self, ledger, collateral_type: str = config.COLLATERAL_TYPE,
                 liquidation_engine=None, oracle_relayer=None, collateral_fsm=None,
                 system_coin_oracle=None, settings: AuctionHouseSettings | None = None,
                 clock=None, address: str = config.AUCTION_HOUSE_ADDRESS, deployer: str = 'deployer'):
        self.ledger = ledger
        self.collateral_type = collateral_type
        self.liquidation_engine = liquidation_engine
        self.oracle_relayer = oracle_relayer
        self.settings = settings if settings is not None else AuctionHouseSettings()
        self.reconciler = PriceReconciler(self.settings, collateral_fsm, system_coin_oracle)
        self.clock = clock if clock is not None else time.time
        self.address = address

        self.authorized_accounts = {deployer}
        self.auctions = {}  # auction_id -> Auction
        self.auctions_started = 0
        self.last_read_redemption_price = 0  # RAY, refreshed by buys and refreshing quotes

        self.events = []
        self.listeners = []
        self._pending_events = []

    # --- Collaborator handles ---

    @property
    def collateral_fsm(self):
        return self.reconciler.collateral_fsm

    @property
    def system_coin_oracle(self):
        return self.reconciler.system_coin_oracle

    def now(self) -> int:
        return int(self.clock())

    # --- Events ---

    def subscribe(self, listener):
        """Registers ``listener(event)``, called once per event after its operation succeeds."""
        self.listeners.append(listener)

    def _emit(self, name: str, auction_id: int | None = None, auction: Auction | None = None, **data):
        self._pending_events.append(
            AuctionEvent(name=name, auction_id=auction_id, timestamp=self.now(), data=data, auction=auction)
        )

    def _flush_events(self):
        pending, self._pending_events = self._pending_events, []
        for event in pending:
            self.events.append(event)
            for listener in self.listeners:
                listener(event)

    @contextmanager
    def _transaction(self, auction: Auction | None = None):
        """Runs a block against the record, the ledger and the debt buffer as one unit."""
        saved_auctions = dict(self.auctions)
        saved_counter = self.auctions_started
        saved_redemption_price = self.last_read_redemption_price
        saved_record = auction.snapshot() if auction is not None else None
        buffer = self.liquidation_engine
        saved_buffer = buffer.snapshot() if buffer is not None and hasattr(buffer, 'snapshot') else None
        try:
            # The ledger restores its own balances before re-raising
            with self.ledger.atomic():
                yield
        except Exception:
            self.auctions = saved_auctions
            self.auctions_started = saved_counter
            self.last_read_redemption_price = saved_redemption_price
            if saved_record is not None:
                auction.restore(saved_record)
            if saved_buffer is not None:
                buffer.restore(saved_buffer)
            self._pending_events = []
            raise
        self._flush_events()

    # --- Authorization & administration ---

    def is_authorized(self, account: str) -> bool:
        return account in self.authorized_accounts

    def _require_authorized(self, caller: str):
        if caller not in self.authorized_accounts:
            raise AuctionHouseError(FailureReason.UNAUTHORIZED, str(caller))

    def add_authorization(self, account: str, *, caller: str):
        self._require_authorized(caller)
        with self._transaction():
            self.authorized_accounts.add(account)
            self._emit('AddAuthorization', account=account)

    def remove_authorization(self, account: str, *, caller: str):
        self._require_authorized(caller)
        with self._transaction():
            self.authorized_accounts.discard(account)
            self._emit('RemoveAuthorization', account=account)

    def modify_parameters(self, parameter: str, data, *, caller: str):
        """Updates one setting or collaborator handle. Out-of-bound values change nothing."""
        self._require_authorized(caller)
        if parameter in self.COLLABORATOR_PARAMETERS:
            if data is None and parameter != 'system_coin_oracle':
                raise AuctionHouseError(FailureReason.INVALID_PARAMETER_VALUE, f"{parameter} cannot be unset")
            with self._transaction():
                if parameter in ('collateral_fsm', 'system_coin_oracle'):
                    setattr(self.reconciler, parameter, data)
                else:
                    setattr(self, parameter, data)
                self._emit('ModifyParameters', parameter=parameter, data=data)
            return

        self.settings.validate(parameter, data, self.now())
        with self._transaction():
            self.settings.modify(parameter, data, self.now())
            self._emit('ModifyParameters', parameter=parameter, data=data)

    # --- Read-only accessors ---

    def auction(self, auction_id: int) -> Auction | None:
        return self.auctions.get(auction_id)

    def remaining_amount_to_sell(self, auction_id: int) -> int:
        auction = self.auctions.get(auction_id)
        return auction.amount_to_sell if auction is not None else 0

    def amount_to_raise(self, auction_id: int) -> int:
        auction = self.auctions.get(auction_id)
        return auction.amount_to_raise if auction is not None else 0

    def forgone_collateral_receiver(self, auction_id: int) -> str | None:
        auction = self.auctions.get(auction_id)
        return auction.forgone_collateral_receiver if auction is not None else None

    def auction_income_recipient(self, auction_id: int) -> str | None:
        auction = self.auctions.get(auction_id)
        return auction.auction_income_recipient if auction is not None else None

    def bid_amount(self, auction_id: int) -> int:
        return 0

    def raised_amount(self, auction_id: int) -> int:
        return 0

    def get_next_current_discount(self, auction_id: int) -> int:
        return get_next_current_discount(self.auctions.get(auction_id), self.now())

    def get_adjusted_bid(self, auction_id: int, wad: int) -> tuple[bool, int]:
        return bid_processor.get_adjusted_bid(self.auctions.get(auction_id), wad, self.settings.minimum_bid)

    # --- Lifecycle ---

    def start_auction(self, forgone_collateral_receiver: str, auction_income_recipient: str,
                      amount_to_raise: int, amount_to_sell: int, *, caller: str) -> int:
        """Takes ``amount_to_sell`` collateral from ``caller`` into custody and opens an auction for it."""
        self._require_authorized(caller)
        if self.auctions_started >= config.MAX_UINT:
            raise AuctionHouseError(FailureReason.AUCTION_COUNTER_OVERFLOW)
        if amount_to_sell <= 0:
            raise AuctionHouseError(FailureReason.NO_COLLATERAL_FOR_SALE)
        if amount_to_raise <= 0:
            raise AuctionHouseError(FailureReason.NOTHING_TO_RAISE)
        if amount_to_raise < RAY:
            raise AuctionHouseError(FailureReason.DUSTY_AUCTION)

        now = self.now()
        discount_increase_deadline = add(now, self.settings.max_discount_update_rate_timeline)
        if discount_increase_deadline > config.MAX_UINT48:
            raise AuctionHouseError(FailureReason.ARITHMETIC_OVERFLOW, "discount increase deadline")

        schedule = DiscountSchedule(
            max_discount=self.settings.max_discount,
            per_second_discount_update_rate=self.settings.per_second_discount_update_rate,
            discount_increase_deadline=discount_increase_deadline,
        )

        with self._transaction():
            self.auctions_started += 1
            auction_id = self.auctions_started
            auction = Auction(
                auction_id=auction_id,
                amount_to_sell=amount_to_sell,
                amount_to_raise=amount_to_raise,
                current_discount=self.settings.min_discount,
                schedule=schedule,
                start_time=now,
                forgone_collateral_receiver=forgone_collateral_receiver,
                auction_income_recipient=auction_income_recipient,
            )
            self.auctions[auction_id] = auction
            self.ledger.transfer_collateral(self.collateral_type, caller, self.address, amount_to_sell)
            self._emit('StartAuction', auction_id, auction,
                       auctions_started=self.auctions_started, amount_to_sell=amount_to_sell,
                       initial_bid=0, amount_to_raise=amount_to_raise,
                       starting_discount=auction.current_discount, max_discount=schedule.max_discount,
                       per_second_discount_update_rate=schedule.per_second_discount_update_rate,
                       discount_increase_deadline=discount_increase_deadline,
                       forgone_collateral_receiver=forgone_collateral_receiver,
                       auction_income_recipient=auction_income_recipient)

        if config.VERBOSE_LOGGING:
            print(f"    >>> [Time {now}] AuctionHouse ({self.collateral_type}): STARTED {auction!r} <<<")
        return auction_id

    def _quote(self, auction: Auction, redemption_price: int, discount: int, adjusted_bid: int) -> int:
        """Collateral bought for ``adjusted_bid``, or 0 when the trusted feed has no valid price."""
        collateral_fsm_price, system_coin_price = \
            self.reconciler.get_collateral_fsm_and_final_system_coin_prices(redemption_price)
        if collateral_fsm_price == 0:
            return 0
        discounted_price = self.reconciler.get_discounted_collateral_price(
            collateral_fsm_price, self.reconciler.get_collateral_median_price(), system_coin_price, discount
        )
        return bid_processor.get_bought_collateral(auction, discounted_price, adjusted_bid)

    def preview_buy(self, auction_id: int, wad: int) -> tuple[int, int]:
        """
        Approximate ``(bought_collateral, adjusted_bid)`` for a bid of ``wad`` right now.

        Uses the cached redemption price (fetched once if nothing is cached yet)
        and the discount the auction would have now, without storing it. Any
        invalid input or missing price gives a zero quote instead of an error.
        """
        auction = self.auctions.get(auction_id)
        valid, adjusted_bid = bid_processor.get_adjusted_bid(auction, wad, self.settings.minimum_bid)
        if not valid:
            return 0, adjusted_bid

        if self.last_read_redemption_price == 0:
            self.last_read_redemption_price = self.oracle_relayer.redemption_price()
        if self.last_read_redemption_price == 0:
            return 0, adjusted_bid

        discount = get_next_current_discount(auction, self.now())
        return self._quote(auction, self.last_read_redemption_price, discount, adjusted_bid), adjusted_bid

    def get_collateral_bought(self, auction_id: int, wad: int) -> tuple[int, int]:
        """Like ``preview_buy`` but refreshes the redemption price and stores the advanced discount."""
        auction = self.auctions.get(auction_id)
        valid, adjusted_bid = bid_processor.get_adjusted_bid(auction, wad, self.settings.minimum_bid)
        if not valid:
            return 0, adjusted_bid

        with self._transaction(auction):
            self.last_read_redemption_price = self.oracle_relayer.redemption_price()
            collateral_fsm_price, _ = \
                self.reconciler.get_collateral_fsm_and_final_system_coin_prices(self.last_read_redemption_price)
            if collateral_fsm_price == 0:
                return 0, adjusted_bid
            discount = update_current_discount(auction, self.now())
            bought = self._quote(auction, self.last_read_redemption_price, discount, adjusted_bid)
        return bought, adjusted_bid

    def buy_collateral(self, auction_id: int, wad: int, *, caller: str) -> tuple[int, int]:
        """
        Pays ``wad`` coins (capped to what the auction still needs) for discounted collateral.

        Returns ``(bought_collateral, adjusted_bid)``. When either side of the
        auction is exhausted the auction settles: leftover collateral goes to
        the forgone collateral receiver and the record is deleted.
        """
        auction = self.auctions.get(auction_id)
        if auction is None or not auction.exists:
            raise AuctionHouseError(FailureReason.INEXISTENT_AUCTION, str(auction_id))
        if not bid_processor.is_valid_bid_size(wad, self.settings.minimum_bid):
            raise AuctionHouseError(FailureReason.INVALID_BID, str(wad))

        adjusted_bid = bid_processor.cap_bid(auction, wad)
        now = self.now()

        with self._transaction(auction):
            self.last_read_redemption_price = self.oracle_relayer.redemption_price()
            collateral_fsm_price, system_coin_price = \
                self.reconciler.get_collateral_fsm_and_final_system_coin_prices(self.last_read_redemption_price)
            if collateral_fsm_price == 0:
                raise AuctionHouseError(FailureReason.COLLATERAL_FSM_INVALID_VALUE)

            discount = update_current_discount(auction, now)
            discounted_price = self.reconciler.get_discounted_collateral_price(
                collateral_fsm_price, self.reconciler.get_collateral_median_price(), system_coin_price, discount
            )
            bought_collateral = bid_processor.get_bought_collateral(auction, discounted_price, adjusted_bid)
            fill = bid_processor.plan_fill(auction, wad, adjusted_bid, bought_collateral)

            # The record holds its final values before any external call is made
            auction.amount_to_sell = fill.amount_to_sell
            auction.amount_to_raise = fill.amount_to_raise
            auction.bids.append({
                'bidder': caller,
                'time': now,
                'wad': wad,
                'adjusted_bid': adjusted_bid,
                'bought_collateral': bought_collateral,
                'discount': discount,
                'discounted_price': discounted_price,
            })
            if fill.settled:
                del self.auctions[auction_id]

            self.ledger.transfer_internal_coins(caller, auction.auction_income_recipient, fill.coins_paid)
            self.ledger.transfer_collateral(self.collateral_type, self.address, caller, bought_collateral)
            self._emit('BuyCollateral', auction_id, auction, wad=wad, bought_collateral=bought_collateral)

            self.liquidation_engine.remove_coins_from_auction(fill.buffer_reduction)

            if fill.settled:
                self.ledger.transfer_collateral(
                    self.collateral_type, self.address, auction.forgone_collateral_receiver, fill.leftover_collateral
                )
                self._emit('SettleAuction', auction_id, auction, leftover_collateral=fill.leftover_collateral)

        if config.VERBOSE_LOGGING:
            print(f"    >>> [Time {now}] {caller} BOUGHT {bought_collateral / config.WAD:.4f} collateral "
                  f"from auction {auction_id} for {adjusted_bid / config.WAD:.2f} coins "
                  f"(discount {discount / config.WAD:.4f}){' - SETTLED' if fill.settled else ''} <<<")
        return bought_collateral, adjusted_bid

    def settle_auction(self, auction_id: int) -> None:
        """Auctions settle inside ``buy_collateral``; kept for parity with other auction houses."""
        return None

    def terminate_auction_prematurely(self, auction_id: int, *, caller: str):
        """Closes an auction outside normal bidding, returning all of its collateral to ``caller``."""
        self._require_authorized(caller)
        auction = self.auctions.get(auction_id)
        if auction is None or not auction.exists:
            raise AuctionHouseError(FailureReason.INEXISTENT_AUCTION, str(auction_id))

        with self._transaction(auction):
            amount_to_sell = auction.amount_to_sell
            amount_to_raise = auction.amount_to_raise
            del self.auctions[auction_id]
            self.liquidation_engine.remove_coins_from_auction(amount_to_raise)
            self.ledger.transfer_collateral(self.collateral_type, self.address, caller, amount_to_sell)
            self._emit('TerminateAuctionPrematurely', auction_id, auction,
                       sender=caller, collateral_amount=amount_to_sell, amount_to_raise=amount_to_raise)

        if config.VERBOSE_LOGGING:
            print(f"    !!! Auction {auction_id} TERMINATED by {caller}. "
                  f"Returned {amount_to_sell / config.WAD:.4f} collateral !!!")

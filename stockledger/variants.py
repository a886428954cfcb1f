"""
Transaction request variants — typed, validated input for the processor.

A transaction is one of three shapes, each carrying only the warehouses
it needs:

    Purchase(target)          +q into target
    Sale(source)              -q from source
    Transfer(source, target)  -q from source, +q into target

parse_request() turns a raw payload into a TransactionRequest holding
one of these routes, so the processor never checks for missing fields.

Usage:
    request = parse_request({
        "type": "transfer",
        "source_warehouse": main.pk,
        "target_warehouse": overflow.pk,
        "items": [{"product": bread.pk, "quantity": 6, "price": "2.50"}],
    })
    request.route.legs(6)  # [(main, -6), (overflow, 6)]
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date as date_cls
from datetime import datetime
from decimal import Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from stockledger.conf import db_alias
from stockledger.exceptions import ValidationError
from stockledger.models.enums import TransactionType
from stockledger.models.party import Party
from stockledger.models.product import Product
from stockledger.models.stock import MAX_QUANTITY
from stockledger.models.warehouse import Warehouse

# Smallest price step of TransactionItem.price
CENT = Decimal('0.01')


@dataclass(frozen=True)
class LineItem:
    product: Product
    quantity: int
    price: Decimal


@dataclass(frozen=True)
class Purchase:
    target: Warehouse

    type = TransactionType.PURCHASE
    source = None

    def legs(self, quantity: int) -> list[tuple[Warehouse, int]]:
        return [(self.target, quantity)]


@dataclass(frozen=True)
class Sale:
    source: Warehouse

    type = TransactionType.SALE
    target = None

    def legs(self, quantity: int) -> list[tuple[Warehouse, int]]:
        return [(self.source, -quantity)]


@dataclass(frozen=True)
class Transfer:
    source: Warehouse
    target: Warehouse

    type = TransactionType.TRANSFER

    def legs(self, quantity: int) -> list[tuple[Warehouse, int]]:
        return [(self.source, -quantity), (self.target, quantity)]


Route = Purchase | Sale | Transfer


def reversal_legs(route: Route, quantity: int) -> list[tuple[Warehouse, int]]:
    """Same legs, same order, inverted sign."""
    return [(warehouse, -delta) for warehouse, delta in route.legs(quantity)]


@dataclass(frozen=True)
class TransactionRequest:
    route: Route
    items: tuple[LineItem, ...]
    date: datetime | None = None
    party: Party | None = None
    notes: str = ''

    @property
    def type(self) -> TransactionType:
        return self.route.type

    @property
    def needs_availability(self) -> bool:
        """Sales and transfers take stock out of the source warehouse."""
        return self.route.source is not None


def route_for(transaction) -> Route:
    """Rebuild the route of a stored Transaction."""
    if transaction.type == TransactionType.PURCHASE:
        return Purchase(target=transaction.target_warehouse)
    if transaction.type == TransactionType.SALE:
        return Sale(source=transaction.source_warehouse)
    return Transfer(source=transaction.source_warehouse, target=transaction.target_warehouse)


# ══════════════════════════════════════════════════════════════
# PARSING
# ══════════════════════════════════════════════════════════════


def parse_request(payload, using: str | None = None) -> TransactionRequest:
    """
    Validate a raw payload and resolve its references.

    Only cross-field business rules and reference existence are checked
    here; request-shape validation belongs to the calling layer.
    References are looked up on `using` (default STOCKLEDGER['DB_ALIAS']).

    Raises:
        ValidationError: INVALID_PAYLOAD, INVALID_TYPE, MISSING_WAREHOUSE,
            SAME_WAREHOUSE, NO_ITEMS, INVALID_QUANTITY, INVALID_PRICE,
            UNKNOWN_REFERENCE
    """
    if not isinstance(payload, Mapping):
        raise ValidationError('INVALID_PAYLOAD', reason='payload must be a mapping')
    using = db_alias(using)

    try:
        tx_type = TransactionType(payload.get('type'))
    except ValueError:
        raise ValidationError('INVALID_TYPE', type=payload.get('type')) from None

    route = _parse_route(
        tx_type, payload.get('source_warehouse'), payload.get('target_warehouse'), using,
    )
    items = _parse_items(payload.get('items'), using)

    party = None
    if payload.get('party') is not None:
        party = _resolve(Party, payload['party'], 'party', using)

    return TransactionRequest(
        route=route,
        items=items,
        date=_parse_date(payload.get('date')),
        party=party,
        notes=payload.get('notes') or '',
    )


def _parse_route(tx_type: TransactionType, source, target, using: str) -> Route:
    if tx_type == TransactionType.PURCHASE:
        if target is None:
            raise ValidationError('MISSING_WAREHOUSE', type=tx_type.value, field='target_warehouse')
        return Purchase(target=_resolve(Warehouse, target, 'target_warehouse', using))

    if tx_type == TransactionType.SALE:
        if source is None:
            raise ValidationError('MISSING_WAREHOUSE', type=tx_type.value, field='source_warehouse')
        return Sale(source=_resolve(Warehouse, source, 'source_warehouse', using))

    missing = [
        field for field, value in (('source_warehouse', source), ('target_warehouse', target))
        if value is None
    ]
    if missing:
        raise ValidationError('MISSING_WAREHOUSE', type=tx_type.value, field=', '.join(missing))

    source = _resolve(Warehouse, source, 'source_warehouse', using)
    target = _resolve(Warehouse, target, 'target_warehouse', using)
    if source.pk == target.pk:
        raise ValidationError('SAME_WAREHOUSE', warehouse=source.pk)
    return Transfer(source=source, target=target)


def _parse_items(raw_items, using: str) -> tuple[LineItem, ...]:
    if not raw_items:
        raise ValidationError('NO_ITEMS')
    if not isinstance(raw_items, (list, tuple)):
        raise ValidationError('INVALID_PAYLOAD', reason='items must be a list')

    parsed = []
    for line, raw in enumerate(raw_items):
        if not isinstance(raw, Mapping):
            raise ValidationError('INVALID_PAYLOAD', line=line, reason='item must be a mapping')
        if raw.get('product') is None:
            raise ValidationError('UNKNOWN_REFERENCE', line=line, field='product', id=None)
        parsed.append((
            _product_key(raw['product'], line),
            _parse_quantity(raw.get('quantity'), line),
            _parse_price(raw.get('price'), line),
        ))

    products = _resolve_products(raw_items, [key for key, _, _ in parsed], using)
    return tuple(
        LineItem(product=products[key], quantity=quantity, price=price)
        for key, quantity, price in parsed
    )


def _parse_quantity(value, line: int) -> int:
    # bool is an int subclass; True is not "1 unit"
    if isinstance(value, bool) or value is None:
        raise ValidationError('INVALID_QUANTITY', line=line, quantity=value)
    if isinstance(value, (float, Decimal)):
        if not math.isfinite(value) or value % 1 != 0:
            raise ValidationError('INVALID_QUANTITY', line=line, quantity=str(value))
        value = int(value)
    if not isinstance(value, int) or not 1 <= value <= MAX_QUANTITY:
        raise ValidationError('INVALID_QUANTITY', line=line, quantity=value)
    return value


def _parse_price(value, line: int) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError('INVALID_PRICE', line=line, price=value)
    try:
        price = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError('INVALID_PRICE', line=line, price=str(value)) from None
    # DecimalField(max_digits=12, decimal_places=2)
    if not price.is_finite() or price < 0 or price >= Decimal('1e10'):
        raise ValidationError('INVALID_PRICE', line=line, price=str(value))
    if price != price.quantize(CENT):
        raise ValidationError(
            'INVALID_PRICE', line=line, price=str(value), reason='more than 2 decimal places',
        )
    return price


def _parse_date(value) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date_cls):
        parsed = datetime.combine(value, datetime.min.time())
    else:
        try:
            parsed = parse_datetime(str(value))
            if parsed is None:
                day = parse_date(str(value))
                parsed = datetime.combine(day, datetime.min.time()) if day else None
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError('INVALID_PAYLOAD', field='date', date=str(value))
    if settings.USE_TZ and timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


def _resolve(model, value, field: str, using: str):
    """Instance or primary key → instance, or UNKNOWN_REFERENCE."""
    if isinstance(value, model):
        return value
    try:
        instance = model.objects.using(using).filter(pk=value).first()
    except (ValueError, TypeError):
        instance = None
    if instance is None:
        raise ValidationError('UNKNOWN_REFERENCE', field=field, id=str(value))
    return instance


def _product_key(value, line: int):
    if isinstance(value, Product):
        return value.pk
    try:
        return Product._meta.pk.to_python(value)
    except (DjangoValidationError, ValueError, TypeError):
        raise ValidationError('UNKNOWN_REFERENCE', line=line, field='product', id=str(value)) from None


def _resolve_products(raw_items, keys, using: str) -> dict:
    """One query for every product referenced by primary key."""
    found = {
        raw['product'].pk: raw['product']
        for raw in raw_items if isinstance(raw['product'], Product)
    }
    wanted = set(keys) - set(found)
    if wanted:
        found.update(Product.objects.using(using).in_bulk(list(wanted)))
    for line, key in enumerate(keys):
        if key not in found:
            raise ValidationError('UNKNOWN_REFERENCE', line=line, field='product', id=str(key))
    return found

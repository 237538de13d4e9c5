import logging
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from retail_ledger.config import get_settings
from retail_ledger.core.constants import (
    DIRECTION_IN,
    DIRECTION_OUT,
    INSTALLMENT_PAID,
    INSTALLMENT_PENDING,
    LEDGER_CASH,
    PAYMENT_METHODS,
    SALE_RETURNED,
    SALE_TYPE_CASH,
    SALE_TYPES,
    STOCK_RETURN,
    STOCK_SALE,
)
from retail_ledger.core.errors import (
    InsufficientStock,
    InvalidDate,
    InvalidDiscount,
    InvalidInstallmentPlan,
    StateConflictError,
    ValidationError,
)
from retail_ledger.core.money import ZERO, to_money
from retail_ledger.core.pagination import normalize_page
from retail_ledger.core.sale_rules import (
    build_schedule,
    close_schedule,
    derive_status,
    derive_status_after_return,
    net_amount,
    respread_schedule,
)
from retail_ledger.database.session import unit_of_work
from retail_ledger.models.customer import Customer
from retail_ledger.models.daily_transaction import DailyTransaction
from retail_ledger.models.installment import Installment
from retail_ledger.models.product import Product
from retail_ledger.models.sale import Sale
from retail_ledger.models.stock_transaction import StockTransaction
from retail_ledger.services import daily_transaction_service as ledger
from retail_ledger.services.lookups import get_customer, get_product, get_sale, sale_installments
from retail_ledger.services.stock_service import adjust_stock, ensure_not_before_purchase, record_movement

logger = logging.getLogger(__name__)


def _validate_sale_input(sale_type, payment_method, quantity, discount, down_payment) -> None:
    if sale_type not in SALE_TYPES:
        raise ValidationError("Sale type must be one of {}".format(", ".join(SALE_TYPES)))
    if payment_method not in PAYMENT_METHODS:
        raise ValidationError("Payment method must be one of {}".format(", ".join(PAYMENT_METHODS)))
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    if to_money(discount) < 0:
        raise InvalidDiscount("Discount must be equal or greater than 0")
    if to_money(down_payment) < 0:
        raise InvalidInstallmentPlan("Down payment must be equal or greater than 0")


def _validate_installment_count(total_installments, max_installments: int) -> None:
    if total_installments is None or total_installments < 1:
        raise InvalidInstallmentPlan("At least one installment is required")
    if total_installments > max_installments:
        raise InvalidInstallmentPlan("Too many installments. Max {}.".format(max_installments))


def create_sale(
    db: Session,
    *,
    customer_id: int,
    product_id: int,
    sale_date: date,
    sale_type: str = SALE_TYPE_CASH,
    quantity: int = 1,
    discount=ZERO,
    payment_method: str = LEDGER_CASH,
    down_payment=ZERO,
    total_installments: int | None = None,
    note: str | None = None,
    max_installments: int | None = None,
    rounding_unit: Decimal | None = None,
) -> Sale:
    """
    Record a cash or installment sale.

    Creates the sale, its installment schedule, the cash-book row for the
    money received up front, the outgoing SALE stock movement and the
    matching stock decrement, all in one unit of work.
    """
    settings = get_settings()
    if max_installments is None:
        max_installments = settings.MAX_INSTALLMENTS
    if rounding_unit is None:
        rounding_unit = settings.INSTALLMENT_ROUNDING_UNIT
    _validate_sale_input(sale_type, payment_method, quantity, discount, down_payment)
    discount = to_money(discount)
    down_payment = to_money(down_payment)

    with unit_of_work(db):
        customer = get_customer(db, customer_id)
        product = get_product(db, product_id)
        ensure_not_before_purchase(db, product, sale_date, "Sale date")

        if product.stock_quantity < quantity:
            raise InsufficientStock(
                "Not enough stock available: {} has {} units, {} requested".format(
                    product.name, product.stock_quantity, quantity
                )
            )

        total_amount = to_money(product.selling_price) * quantity
        if discount > total_amount:
            raise InvalidDiscount("Discount cannot be greater than total amount")
        net = net_amount(total_amount, discount)

        schedule = []
        if sale_type == SALE_TYPE_CASH:
            paid_amount = net
            down_payment = net
            remaining_amount = ZERO
            total_installments = 0
            per_installment = ZERO
            paid_installments = 1 if paid_amount > 0 else 0
        else:
            _validate_installment_count(total_installments, max_installments)
            if down_payment > net:
                raise InvalidInstallmentPlan("Down payment cannot be greater than the amount owed")
            paid_amount = down_payment
            remaining_amount = net - down_payment
            paid_installments = 0
            if remaining_amount > 0:
                schedule = build_schedule(remaining_amount, total_installments, sale_date, rounding_unit)
                per_installment = schedule[0][0]
            else:
                total_installments = 0
                per_installment = ZERO

        sale = Sale(
            customer_id=customer.id,
            product_id=product.id,
            sale_date=sale_date,
            sale_type=sale_type,
            payment_method=payment_method,
            quantity=quantity,
            discount=discount,
            total_amount=total_amount,
            down_payment=down_payment,
            paid_amount=paid_amount,
            remaining_amount=remaining_amount,
            per_installment=per_installment,
            total_installments=total_installments,
            paid_installments=paid_installments,
            return_quantity=0,
            return_amount=ZERO,
            status=derive_status(remaining_amount, units_held=quantity, units_returned=0),
        )
        db.add(sale)
        db.flush()

        for amount, due_date in schedule:
            db.add(
                Installment(
                    sale_id=sale.id,
                    amount=amount,
                    due_date=due_date,
                    paid_date=None,
                    status=INSTALLMENT_PENDING,
                )
            )

        if down_payment > 0:
            label = "Payment" if sale_type == SALE_TYPE_CASH else "Down Payment"
            ledger.record_entry(
                db,
                ledger_type=payment_method,
                direction=DIRECTION_IN,
                amount=down_payment,
                entry_date=sale_date,
                note="Sale #{} {} from customer. Method: {}".format(sale.id, label, payment_method),
                sale_id=sale.id,
            )

        record_movement(
            db,
            product,
            quantity=quantity,
            direction=DIRECTION_OUT,
            movement_type=STOCK_SALE,
            movement_date=sale_date,
            note=note or "Sale #{} to customer. Method: {}".format(sale.id, payment_method),
            sale_id=sale.id,
        )

    logger.info(
        "Sale %s created: %s x%s, total %s, paid %s, remaining %s, status %s",
        sale.id,
        sale_type,
        quantity,
        sale.total_amount,
        sale.paid_amount,
        sale.remaining_amount,
        sale.status,
        extra={"sale_id": sale.id},
    )
    return sale


def return_sale(
    db: Session,
    sale_id: int,
    *,
    return_date: date,
    quantity: int,
    refund_method: str = LEDGER_CASH,
    note: str | None = None,
) -> Sale:
    """
    Take back ``quantity`` units of a sale.

    A partial return refunds the value of the returned units out of the down
    payment when the down payment covers it, and nothing otherwise. A full
    return refunds everything the customer still has paid in, drops the
    sale's inbound cash-book rows and closes the installment schedule.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationError("Return quantity must be greater than zero.")
    if refund_method not in PAYMENT_METHODS:
        raise ValidationError("Refund method must be one of {}".format(", ".join(PAYMENT_METHODS)))

    with unit_of_work(db):
        sale = get_sale(db, sale_id)
        if sale.status == SALE_RETURNED:
            raise StateConflictError("Sale is already fully returned.")
        units_held = sale.quantity
        if quantity > units_held:
            raise StateConflictError(
                "Cannot return {} units. Only {} units remain to be returned.".format(quantity, units_held)
            )
        if return_date < sale.sale_date:
            raise InvalidDate(
                "Return date cannot be before {} sale date".format(sale.sale_date.isoformat())
            )

        product = get_product(db, sale.product_id)
        customer = get_customer(db, sale.customer_id)
        total_amount = to_money(sale.total_amount)
        discount = to_money(sale.discount)
        paid_amount = to_money(sale.paid_amount)
        down_payment = to_money(sale.down_payment)

        units_left = units_held - quantity
        status = derive_status_after_return(units_left)
        installments = sale_installments(db, sale.id)

        if status == SALE_RETURNED:
            refund = max(paid_amount, ZERO)
            new_total = new_discount = new_down = new_paid = new_remaining = ZERO
        else:
            # Returned goods are valued at the price the sale was made at.
            unit_price = total_amount / units_held
            value_returned = to_money(unit_price * quantity)
            if down_payment >= value_returned:
                refund = value_returned
            else:
                refund = ZERO
            new_down = down_payment - refund
            new_total = to_money(total_amount * units_left / units_held)
            new_discount = to_money(discount * units_left / units_held)
            new_paid = paid_amount - refund
            new_remaining = max(net_amount(new_total, new_discount) - new_paid, ZERO)

        record_movement(
            db,
            product,
            quantity=quantity,
            direction=DIRECTION_IN,
            movement_type=STOCK_RETURN,
            movement_date=return_date,
            note="RETURN: Sale #{}. {} units returned. Note: {}".format(sale.id, quantity, note or ""),
            sale_id=sale.id,
        )

        if status == SALE_RETURNED:
            removed = ledger.delete_linked_entries(db, direction=DIRECTION_IN, sale_id=sale.id)
            logger.info("Full return of sale %s removed %s inbound ledger rows", sale.id, removed)
        if refund > 0:
            ledger.record_entry(
                db,
                ledger_type=refund_method,
                direction=DIRECTION_OUT,
                amount=refund,
                entry_date=return_date,
                note="REFUND: Sale return for customer {}. Sale ID: {}. Method: {}.".format(
                    customer.name, sale.id, refund_method
                ),
                sale_id=sale.id,
            )

        if status == SALE_RETURNED:
            for installment in installments:
                installment.amount = ZERO
                installment.status = INSTALLMENT_PAID
                installment.paid_date = return_date
        elif new_remaining <= 0:
            close_schedule(installments, return_date)
        else:
            respread_schedule(installments, new_remaining, get_settings().INSTALLMENT_ROUNDING_UNIT)

        sale.quantity = units_left
        sale.total_amount = new_total
        sale.discount = new_discount
        sale.down_payment = new_down
        sale.paid_amount = new_paid
        sale.remaining_amount = new_remaining
        sale.return_quantity = (sale.return_quantity or 0) + quantity
        sale.return_amount = to_money(sale.return_amount) + refund
        sale.status = status

    logger.info(
        "Sale %s return of %s units, refund %s, status %s",
        sale.id,
        quantity,
        refund,
        sale.status,
        extra={"sale_id": sale.id},
    )
    return sale


def undo_sale(db: Session, sale: Sale) -> Product:
    """
    Remove a sale and everything hanging off it, in foreign-key order:
    ledger rows, installments, stock movements, then the sale itself.
    Units the customer still held go back on the shelf.
    """
    installment_ids = select(Installment.id).where(Installment.sale_id == sale.id)
    db.execute(
        delete(DailyTransaction).where(
            or_(
                DailyTransaction.sale_id == sale.id,
                DailyTransaction.installment_id.in_(installment_ids),
            )
        )
    )
    db.execute(delete(Installment).where(Installment.sale_id == sale.id))
    db.execute(delete(StockTransaction).where(StockTransaction.sale_id == sale.id))

    product = get_product(db, sale.product_id)
    if sale.quantity > 0:
        adjust_stock(product, sale.quantity)
    db.delete(sale)
    db.flush()
    return product


def delete_sale(db: Session, sale_id: int) -> Sale:
    with unit_of_work(db):
        sale = get_sale(db, sale_id)
        product = undo_sale(db, sale)
    logger.info(
        "Deleted sale %s, product %s on hand %s",
        sale_id,
        product.id,
        product.stock_quantity,
        extra={"sale_id": sale_id},
    )
    return sale


def get_sale_detail(db: Session, sale_id: int) -> dict:
    sale = get_sale(db, sale_id)
    return {
        "sale": sale,
        "customer": get_customer(db, sale.customer_id),
        "product": get_product(db, sale.product_id),
        "installments": sale_installments(db, sale.id),
    }


def list_sales(
    db: Session,
    *,
    customer_id: int | None = None,
    customer_name: str | None = None,
    cnic: str | None = None,
    phone: str | None = None,
    product_name: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
    status: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    page, limit, offset = normalize_page(page, limit)
    filters = []
    if customer_id is not None:
        filters.append(Sale.customer_id == customer_id)
    elif customer_name:
        filters.append(Customer.name.contains(customer_name.strip().lower()))
    elif cnic:
        filters.append(Customer.cnic.contains(cnic.strip()))
    elif phone:
        filters.append(Customer.phone.contains(phone.strip()))
    if product_name:
        filters.append(Product.name.contains(product_name.strip().lower()))
    if date_from:
        filters.append(Sale.sale_date >= date_from)
    if date_to:
        filters.append(Sale.sale_date <= date_to)
    if status:
        filters.append(Sale.status == status)

    base = (
        select(Sale, Customer.name.label("customer_name"), Product.name.label("product_name"))
        .join(Customer, Customer.id == Sale.customer_id)
        .join(Product, Product.id == Sale.product_id)
        .where(*filters)
    )
    rows = db.execute(
        base.order_by(Sale.sale_date.desc(), Sale.id.desc()).offset(offset).limit(limit)
    ).all()
    total = db.execute(
        select(func.count(Sale.id))
        .join(Customer, Customer.id == Sale.customer_id)
        .join(Product, Product.id == Sale.product_id)
        .where(*filters)
    ).scalar_one()

    sales = [
        {"sale": sale, "customer_name": customer_name, "product_name": product_name}
        for sale, customer_name, product_name in rows
    ]
    return {"sales": sales, "total": total, "page": page, "limit": limit}

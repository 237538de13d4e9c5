import argparse
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy import select

from retail_ledger.core.logging import setup_logging
from retail_ledger.database import Base, SessionLocal, engine
from retail_ledger.models import import_all_models
from retail_ledger.models.customer import Customer
from retail_ledger.services.customer_service import create_customer
from retail_ledger.services.product_service import create_product
from retail_ledger.services.sale_service import create_sale


def parse_args():
    parser = argparse.ArgumentParser(description="Seed a demo shop with customers, products and sales.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop and recreate every table before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    if args.reset:
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        has_customer = db.execute(select(Customer.id).limit(1)).first()
        if has_customer:
            print("Seed skipped: customers already exist.")
            return

        opened = date.today() - timedelta(days=60)
        ali = create_customer(
            db,
            name="Ali Raza",
            cnic="3520212345671",
            phone="03001234567",
            address="Model Town, Lahore",
        )
        sana = create_customer(
            db,
            name="Sana Tariq",
            cnic="4210198765432",
            phone="03219876543",
            address="Gulshan, Karachi",
            email="sana@example.com",
        )

        fridge = create_product(
            db,
            name="Dawlance Fridge 9178",
            category="appliances",
            brand="dawlance",
            buying_price=Decimal("85000"),
            selling_price=Decimal("102000"),
            stock_quantity=5,
            purchase_date=opened,
        )
        fan = create_product(
            db,
            name="Pak Fan Ceiling 56",
            category="fans",
            brand="pak fan",
            buying_price=Decimal("7500"),
            selling_price=Decimal("9500"),
            stock_quantity=20,
            purchase_date=opened,
        )

        create_sale(
            db,
            customer_id=ali.id,
            product_id=fan.id,
            sale_date=opened + timedelta(days=5),
            quantity=2,
            discount=Decimal("500"),
        )
        create_sale(
            db,
            customer_id=sana.id,
            product_id=fridge.id,
            sale_date=opened + timedelta(days=10),
            sale_type="INSTALLMENT",
            down_payment=Decimal("30000"),
            total_installments=6,
        )
        print("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()

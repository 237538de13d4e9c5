import argparse
import logging

from retail_ledger.core.logging import setup_logging
from retail_ledger.database import Base, SessionLocal, engine
from retail_ledger.models import import_all_models
from retail_ledger.services.summary_service import aggregate_range, recompute_month

logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Rebuild monthly summaries from the ledgers.")
    parser.add_argument("--month", type=int, required=True, help="Month to rebuild (1-12).")
    parser.add_argument("--year", type=int, required=True, help="Year to rebuild.")
    parser.add_argument("--to-month", type=int, help="Last month of a range.")
    parser.add_argument("--to-year", type=int, help="Year of the last month of a range.")
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if args.to_month is None and args.to_year is None:
            summary = recompute_month(db, args.month, args.year)
            print(
                "{:04d}-{:02d}: sales {} net profit {} stock value {}".format(
                    summary.year, summary.month, summary.total_sales, summary.net_profit, summary.stock_value
                )
            )
            return

        result = aggregate_range(
            db,
            args.month,
            args.year,
            args.to_month or args.month,
            args.to_year or args.year,
        )
        for point in result["trend_data"]:
            print(
                "{:04d}-{:02d}: sales {} net profit {}".format(
                    point["year"], point["month"], point["total_sales"], point["net_profit"]
                )
            )
        print("Rebuilt {} months, net profit {}".format(result["months"], result["net_profit"]))
    finally:
        db.close()


if __name__ == "__main__":
    main()

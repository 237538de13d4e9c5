DIRECTION_IN = "IN"
DIRECTION_OUT = "OUT"
DIRECTIONS = (DIRECTION_IN, DIRECTION_OUT)

STOCK_PURCHASE = "PURCHASE"
STOCK_SALE = "SALE"
STOCK_RETURN = "RETURN"
STOCK_TYPES = (STOCK_PURCHASE, STOCK_SALE, STOCK_RETURN)

SALE_TYPE_CASH = "CASH"
SALE_TYPE_INSTALLMENT = "INSTALLMENT"
SALE_TYPES = (SALE_TYPE_CASH, SALE_TYPE_INSTALLMENT)

SALE_ACTIVE = "ACTIVE"
SALE_PARTIAL = "PARTIAL"
SALE_COMPLETED = "COMPLETED"
SALE_RETURNED = "RETURNED"
SALE_STATUSES = (SALE_ACTIVE, SALE_PARTIAL, SALE_COMPLETED, SALE_RETURNED)
SALE_CLOSED_STATUSES = (SALE_COMPLETED, SALE_RETURNED)

INSTALLMENT_PENDING = "PENDING"
INSTALLMENT_PAID = "PAID"
INSTALLMENT_LATE = "LATE"
INSTALLMENT_STATUSES = (INSTALLMENT_PENDING, INSTALLMENT_PAID, INSTALLMENT_LATE)
INSTALLMENT_UNPAID_STATUSES = (INSTALLMENT_PENDING, INSTALLMENT_LATE)

LEDGER_CASH = "CASH"
LEDGER_BANK = "BANK"
LEDGER_EXPENSE = "EXPENSE"
LEDGER_DEBT = "DEBT"
LEDGER_TYPES = (LEDGER_CASH, LEDGER_BANK, LEDGER_EXPENSE, LEDGER_DEBT)
LEDGER_OUTFLOW_TYPES = (LEDGER_EXPENSE, LEDGER_DEBT)

PAYMENT_METHODS = (LEDGER_CASH, LEDGER_BANK)
